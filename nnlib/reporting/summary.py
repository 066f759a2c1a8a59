"""Deterministic run summarisation helpers."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Iterable, Mapping

import numpy as np

_SKIP = {"epoch", "seed"}


def _extract_numeric(records: Iterable[Mapping[str, object]]) -> Mapping[str, list[float]]:
    metrics: dict[str, list[float]] = {}
    for record in records:
        for key, value in record.items():
            if key in _SKIP or isinstance(value, bool):
                continue
            if isinstance(value, (int, float)):
                metrics.setdefault(key, []).append(float(value))
    return metrics


def _build_summary(records: list[Mapping[str, object]]) -> Mapping[str, object]:
    summary_metrics: dict[str, Mapping[str, float]] = {}
    for name, values in _extract_numeric(records).items():
        arr = np.asarray(values, dtype=np.float64)
        summary_metrics[name] = {
            "min": float(np.min(arr)),
            "max": float(np.max(arr)),
            "mean": float(np.mean(arr)),
            "last": float(arr[-1]),
        }

    summary: dict[str, object] = {
        "version": 1,
        "records": len(records),
        "metrics": summary_metrics,
    }
    scored = [r for r in records if isinstance(r.get("accuracy"), (int, float))]
    if scored:
        # First epoch reaching the best accuracy wins.
        best = max(scored, key=lambda r: (float(r["accuracy"]), -int(r.get("epoch", 0))))
        summary["best_accuracy"] = float(best["accuracy"])
        summary["best_epoch"] = int(best.get("epoch", 0))
        summary["final_accuracy"] = float(scored[-1]["accuracy"])
    return summary


def read_records(metrics_jsonl: str | Path) -> list[Mapping[str, object]]:
    path = Path(metrics_jsonl)
    records: list[Mapping[str, object]] = []
    if path.exists():
        for line in path.read_text().splitlines():
            line = line.strip()
            if line:
                records.append(json.loads(line))
    return records


def write_summary(metrics_jsonl: str | Path, out_summary_json: str | Path) -> str:
    """Write a deterministic summary for ``metrics_jsonl``."""

    out_path = Path(out_summary_json)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    summary = _build_summary(read_records(metrics_jsonl))
    out_path.write_text(json.dumps(summary, sort_keys=True, indent=2))
    return str(out_path)


__all__ = ["read_records", "write_summary"]
