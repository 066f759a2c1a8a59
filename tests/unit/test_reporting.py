import csv
import json
from pathlib import Path

import numpy as np
import pytest

from nnlib.core.errors import DimensionMismatchError
from nnlib.core.linalg import Matrix, Vector
from nnlib.core.types import ModelDescription
from nnlib.reporting import (
    CsvSink,
    JsonlSink,
    PlotAdapter,
    render_image,
    vector_to_image,
    write_manifest,
    write_summary,
)


def test_jsonl_sink_records(tmp_path):
    sink = JsonlSink(tmp_path / "metrics.jsonl", split="test", seed=3, sha="abc")
    sink.on_epoch(0, {"accuracy": 0.5, "correct": 5})
    sink(1, {"accuracy": 0.75, "correct": 7, "note": "ignored"})
    records = [json.loads(line) for line in sink.path.read_text().splitlines()]
    assert records[0] == {"epoch": 0, "split": "test", "seed": 3, "sha": "abc", "accuracy": 0.5, "correct": 5.0}
    assert "note" not in records[1]


def test_csv_sink_writes_header_once(tmp_path):
    sink = CsvSink(tmp_path / "metrics.csv")
    sink.on_epoch(0, {"accuracy": 0.1})
    sink.on_epoch(1, {"accuracy": 0.2})
    with sink.path.open() as handle:
        rows = list(csv.DictReader(handle))
    assert [row["epoch"] for row in rows] == ["0", "1"]
    assert rows[1]["accuracy"] == "0.2"


def test_summary_reports_best_and_final_accuracy(tmp_path):
    metrics = tmp_path / "metrics.jsonl"
    lines = [
        {"epoch": 0, "split": "test", "seed": 0, "accuracy": 0.4, "cost": 0.3},
        {"epoch": 1, "split": "test", "seed": 0, "accuracy": 0.9, "cost": 0.1},
        {"epoch": 2, "split": "test", "seed": 0, "accuracy": 0.9, "cost": 0.05},
        {"epoch": 3, "split": "test", "seed": 0, "accuracy": 0.8, "cost": 0.07},
    ]
    metrics.write_text("\n".join(json.dumps(line) for line in lines) + "\n")
    out = write_summary(metrics, tmp_path / "summary.json")
    summary = json.loads(Path(out).read_text())
    assert summary["records"] == 4
    assert summary["best_accuracy"] == 0.9
    assert summary["best_epoch"] == 1
    assert summary["final_accuracy"] == 0.8
    assert summary["metrics"]["cost"]["min"] == 0.05
    assert "seed" not in summary["metrics"]


def test_summary_of_missing_file(tmp_path):
    out = write_summary(tmp_path / "absent.jsonl", tmp_path / "summary.json")
    summary = json.loads(Path(out).read_text())
    assert summary["records"] == 0
    assert "best_accuracy" not in summary


def test_manifest_includes_network(tmp_path, monkeypatch):
    monkeypatch.setenv("NNLIB_DATA_OFFLINE", "1")
    path = write_manifest(
        tmp_path / "manifest.json",
        config={"train": {"seed": 1}},
        dataset_provenance={"type": "synthetic"},
        network=ModelDescription([1, 2], "sigmoid", "quadratic"),
    )
    manifest = json.loads(Path(path).read_text())
    assert manifest["network"] == {
        "layer_sizes": [1, 2],
        "nonlinearity": "sigmoid",
        "cost": "quadratic",
        "parameters": 4,
    }
    assert manifest["environment"]["offline"] == "1"
    assert manifest["dataset"] == {"type": "synthetic"}


def test_plot_adapter_disabled_writes_nothing(tmp_path):
    plots = PlotAdapter(tmp_path / "run", enable_plots=False)
    plots.on_epoch(1, {"accuracy": 0.5, "cost": 0.1})
    assert plots.close() is None
    assert not (tmp_path / "run").exists()


def test_plot_adapter_writes_png(tmp_path):
    plots = PlotAdapter(tmp_path, enable_plots=True)
    for epoch, acc in enumerate([0.2, 0.6, 0.9]):
        plots(epoch, {"accuracy": acc, "cost": 1.0 - acc})
    path = plots.close()
    assert path == tmp_path / "accuracy.png"
    assert path.stat().st_size > 0


def test_render_image_half_blocks():
    image = Matrix([[0.0, 1.0, 0.0, 1.0], [0.0, 0.0, 1.0, 1.0]])
    assert render_image(image) == " ▀▄█"


def test_render_image_threshold_and_rows():
    image = Matrix(np.full((4, 2), 0.4))
    assert render_image(image) == "  \n  "
    assert render_image(image, threshold=0.3) == "██\n██"


def test_render_image_requires_even_height():
    with pytest.raises(DimensionMismatchError):
        render_image(Matrix.zeros(3, 2))


def test_vector_to_image():
    image = vector_to_image(Vector([1.0, 2.0, 3.0, 4.0, 5.0, 6.0]), 2, 3)
    assert image.shape == (2, 3)
    assert image[1, 0] == 4.0
    with pytest.raises(DimensionMismatchError):
        vector_to_image(Vector([1.0, 2.0]), 2, 3)
