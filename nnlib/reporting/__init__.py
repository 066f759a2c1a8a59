"""Reporting utilities for nnlib training runs."""

from .artifacts import write_manifest
from .console import render_image, vector_to_image
from .metrics import CsvSink, JsonlSink
from .plots import PlotAdapter
from .summary import write_summary

__all__ = [
    "CsvSink",
    "JsonlSink",
    "PlotAdapter",
    "render_image",
    "vector_to_image",
    "write_manifest",
    "write_summary",
]
