"""Config-driven pipeline assembly and presets for nnlib runs."""

from __future__ import annotations

import json
import logging
import os
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Sequence

import yaml

from ..core.network import Network
from ..core.types import RunResult
from ..data import registry
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "sign-sigmoid": {
        "data": {"name": "sign", "options": {"n_train": 80, "n_test": 20, "seed": 0}},
        "model": {"hidden": [], "nonlinearity": "sigmoid", "cost": "quadratic"},
        "train": {
            "epochs": 10,
            "mini_batch_size": 10,
            "eta": 1.0,
            "seed": 0,
            "run_dir": "runs/sign-sigmoid",
            "enable_plots": False,
        },
    },
    # Single-layer ReLU outputs can die at this step size, so accuracy depends
    # on the seed and often stays well below the sigmoid preset.
    "sign-relu": {
        "data": {"name": "sign", "options": {"n_train": 80, "n_test": 20, "seed": 0}},
        "model": {"hidden": [], "nonlinearity": "relu", "cost": "quadratic"},
        "train": {
            "epochs": 10,
            "mini_batch_size": 10,
            "eta": 1.0,
            "seed": 0,
            "run_dir": "runs/sign-relu",
            "enable_plots": False,
        },
    },
    "mnist-sigmoid": {
        "data": {"name": "mnist", "options": {"offline": True}},
        "model": {
            "d_in": 784,
            "d_out": 10,
            "hidden": [16, 16],
            "nonlinearity": "sigmoid",
            "cost": "quadratic",
        },
        "train": {
            "epochs": 30,
            "mini_batch_size": 10,
            "eta": 3.0,
            "seed": 0,
            "run_dir": "runs/mnist-sigmoid",
            "enable_plots": False,
        },
    },
    "identity-chain": {
        "data": {"name": "unit", "options": {"n_train": 0, "n_test": 1}},
        "model": {"hidden": [1, 1], "nonlinearity": "sigmoid", "cost": "quadratic"},
        "train": {
            "epochs": 0,
            "mini_batch_size": 1,
            "eta": 0.0,
            "seed": 0,
            "run_dir": "runs/identity-chain",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_FILE_PRESETS_CACHE: Dict[str, Mapping[str, object]] | None = None
_REQUIRED_SECTIONS = {"data", "model", "train"}


def _read_preset_file(path: Path) -> Mapping[str, object]:
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported preset file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Preset {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    global _FILE_PRESETS_CACHE
    if _FILE_PRESETS_CACHE is None:
        found: Dict[str, Mapping[str, object]] = {}
        if _PRESET_DIR.exists():
            for file in sorted(_PRESET_DIR.iterdir()):
                if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                    continue
                data = _read_preset_file(file)
                missing = _REQUIRED_SECTIONS - set(data)
                if missing:
                    missing_str = ", ".join(sorted(missing))
                    raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
                found[file.stem] = json.loads(json.dumps(data))
        _FILE_PRESETS_CACHE = found
    return {name: deepcopy(cfg) for name, cfg in _FILE_PRESETS_CACHE.items()}


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Mapping[str, object]:
    file_presets = _file_presets()
    if name in file_presets:
        return file_presets[name]
    try:
        return deepcopy(_PRESETS[name])
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


class _MetricsCapture:
    def __init__(self) -> None:
        self.history: list[tuple[int, Mapping[str, float]]] = []
        self.last: Mapping[str, float] = {}

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        payload = {k: float(v) for k, v in metrics.items()}
        self.history.append((int(epoch), payload))
        self.last = payload


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    """Build the dataset and network described by ``config``, train, and write artifacts."""

    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    data_cfg = dict(config["data"])
    model_cfg = dict(config["model"])
    train_cfg = dict(config["train"])

    options = dict(data_cfg.get("options", {}))
    if os.environ.get("NNLIB_DATA_OFFLINE") == "1":
        options["offline"] = True
    dataset = registry.get_dataset(str(data_cfg["name"]), **options)
    data_spec = dataset.data_spec

    d_in = int(model_cfg.get("d_in", data_spec.d_in))
    d_out = int(model_cfg.get("d_out", data_spec.d_out))
    if d_in != data_spec.d_in:
        raise ValueError(f"Configured d_in={d_in} but dataset {dataset.name!r} has {data_spec.d_in}")
    if d_out != data_spec.d_out:
        raise ValueError(
            f"Configured d_out={d_out} but dataset {dataset.name!r} has {data_spec.d_out}"
        )
    hidden = [int(h) for h in model_cfg.get("hidden", [])]
    layer_sizes = [d_in, *hidden, d_out]

    seed = train_cfg.get("seed")
    seed = int(seed) if seed is not None else None
    network = Network(
        layer_sizes,
        nonlinearity=str(model_cfg.get("nonlinearity", "sigmoid")),
        cost=str(model_cfg.get("cost", "quadratic")),
        seed=seed,
    )
    description = network.describe()

    run_dir = _resolve_run_dir(train_cfg, dataset.name, description.nonlinearity)
    run_dir.mkdir(parents=True, exist_ok=True)
    _log_startup_summary(
        dataset_name=dataset.name,
        splits=dataset.splits,
        layer_sizes=layer_sizes,
        nonlinearity=description.nonlinearity,
        cost=description.cost,
        param_count=description.parameter_count,
        run_dir=run_dir,
    )

    split = "test" if dataset.test else "train"
    jsonl = JsonlSink(run_dir / "metrics.jsonl", split=split, seed=seed)
    csv_sink = CsvSink(run_dir / "metrics.csv", split=split)
    capture = _MetricsCapture()
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(network, callbacks=[jsonl, csv_sink, capture, plots], seed=seed)

    epochs = int(train_cfg.get("epochs", 1))
    trainer.sgd(
        dataset.training,
        epochs=epochs,
        mini_batch_size=int(train_cfg.get("mini_batch_size", 10)),
        eta=float(train_cfg.get("eta", 1.0)),
        test_data=dataset.test or None,
    )
    plots.close()

    safe = _safe_config(config, hidden)
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=safe,
        dataset_provenance=dataset.provenance,
        network=description,
    )
    summary_path = write_summary(jsonl.path, run_dir / "summary.json")
    (run_dir / "config.json").write_text(json.dumps(safe, indent=2))
    if capture.last:
        logger.info("Final metrics: %s", json.dumps(capture.last, sort_keys=True))

    return RunResult(
        epochs=epochs,
        metrics_path=str(jsonl.path),
        manifest_path=manifest,
        summary_path=str(summary_path),
        network=network,
        dataset=dataset,
    )


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str, nonlinearity: str) -> Path:
    if train_cfg.get("run_dir"):
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset / nonlinearity


def _safe_config(config: Mapping[str, object], hidden: Iterable[int]) -> Mapping[str, object]:
    copied = json.loads(json.dumps(config))
    copied.setdefault("model", {})["hidden"] = list(hidden)
    return copied


def _log_startup_summary(
    *,
    dataset_name: str,
    splits: Mapping[str, int],
    layer_sizes: Sequence[int],
    nonlinearity: str,
    cost: str,
    param_count: int,
    run_dir: Path,
) -> None:
    lines: List[str] = [
        "=== nnlib run ===",
        f"Dataset       : {dataset_name} (train={splits['train']}, test={splits['test']})",
        f"Layer sizes   : {list(layer_sizes)}",
        f"Nonlinearity  : {nonlinearity}",
        f"Cost          : {cost}",
        f"Parameters    : {param_count}",
        f"Run directory : {run_dir}",
    ]
    for line in lines:
        logger.info(line)


__all__ = ["load_preset", "presets", "run_pipeline"]
