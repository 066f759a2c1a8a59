"""Command line entry point for nnlib training runs."""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Iterable, TextIO

import yaml

from nnlib.core.activations import available_nonlinearities
from nnlib.core.encoding import one_hot_to_index
from nnlib.core.linalg import Vector
from nnlib.core.network import Network
from nnlib.core.types import RunResult
from nnlib.data.registry import DatasetSpec
from nnlib.reporting.console import render_image, vector_to_image
from nnlib.training import pipelines

logger = logging.getLogger(__name__)


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from ``level`` or the ``LOG_LEVEL`` environment variable."""

    log_level_str = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, log_level_str, logging.INFO)
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
    logging.getLogger("matplotlib").setLevel(logging.WARNING)


def _format_result(result: RunResult) -> str:
    payload = {
        "epochs": result.epochs,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if result.summary_path:
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="sign-sigmoid",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument(
        "--nonlinearity",
        choices=sorted(available_nonlinearities()),
        help="Override the nonlinearity used by every layer",
    )
    parser.add_argument("--epochs", type=int, help="Override the number of epochs")
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and shuffling")
    parser.add_argument(
        "--mnist-dir", type=Path, help="Directory holding the four MNIST IDX files"
    )
    parser.add_argument(
        "--enable-plots", action="store_true", help="Write accuracy.png into the run directory"
    )
    parser.add_argument(
        "--show-predictions",
        type=int,
        default=0,
        metavar="N",
        help="Print the first N test examples with actual and predicted class",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="After training, read one float per line from stdin and classify it",
    )
    parser.add_argument(
        "--dump-config", type=Path, help="Dump the resolved config to a JSON file"
    )
    parser.add_argument("--log-level", help="Logging level (defaults to $LOG_LEVEL or INFO)")
    return parser.parse_args(argv)


def _load_override(path: Path) -> dict:
    text = path.read_text()
    if path.suffix in {".yml", ".yaml"}:
        return yaml.safe_load(text) or {}
    return json.loads(text)


def _merge(base: dict, override: dict) -> dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _merge(dict(base[key]), value)
        else:
            base[key] = value
    return base


def _class_label(dataset: DatasetSpec, index: int) -> str:
    labels = dataset.data_spec.extra.get("labels")
    if labels and 0 <= index < len(labels):
        return str(labels[index])
    return str(index)


def show_predictions(
    network: Network, dataset: DatasetSpec, count: int, out: TextIO | None = None
) -> None:
    """Print up to ``count`` test examples next to the network's prediction."""

    out = sys.stdout if out is None else out
    shape = dataset.data_spec.extra.get("image_shape")
    for example in dataset.test[:count]:
        if shape:
            print(render_image(vector_to_image(example.inputs, *shape)), file=out)
        else:
            print(f"Input: {example.inputs}", file=out)
        actual = _class_label(dataset, one_hot_to_index(example.target))
        predicted = _class_label(dataset, network.predict(example.inputs))
        print(f"Actual: {actual}, predicted: {predicted}", file=out)


def interactive_loop(
    network: Network,
    dataset: DatasetSpec,
    stdin: TextIO | None = None,
    out: TextIO | None = None,
) -> None:
    """Classify one float per input line until EOF."""

    stdin = sys.stdin if stdin is None else stdin
    out = sys.stdout if out is None else out
    if network.input_size != 1:
        raise SystemExit(
            f"--interactive needs a single-input network, this one takes {network.input_size}"
        )
    for line in stdin:
        line = line.strip()
        if not line:
            continue
        try:
            value = float(line)
        except ValueError:
            logger.warning("Ignoring non-numeric input %r", line)
            continue
        inputs = Vector([value])
        output = network.feed_forward(inputs)
        print(f"Input: {inputs}", file=out)
        print(f"Output: {output}", file=out)
        print(f"Prediction: {_class_label(dataset, network.predict(inputs))}", file=out)


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    configure_logging(args.log_level)

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = json.loads(json.dumps(pipelines.load_preset(args.preset)))

    if args.config:
        override = _load_override(args.config)
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = _merge(config, override)

    if args.nonlinearity:
        config.setdefault("model", {})["nonlinearity"] = args.nonlinearity
    if args.epochs is not None:
        config.setdefault("train", {})["epochs"] = int(args.epochs)
    if args.seed is not None:
        config.setdefault("train", {})["seed"] = int(args.seed)
    if args.enable_plots:
        config.setdefault("train", {})["enable_plots"] = True
    if args.mnist_dir is not None:
        if config.get("data", {}).get("name") != "mnist":
            raise SystemExit("--mnist-dir only applies to presets using the mnist dataset")
        options = config["data"].setdefault("options", {})
        options.update({"data_dir": str(args.mnist_dir), "offline": False})

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    result = pipelines.run_pipeline(config)

    if args.show_predictions > 0:
        show_predictions(result.network, result.dataset, args.show_predictions)
    if args.interactive:
        interactive_loop(result.network, result.dataset)

    print(_format_result(result))


if __name__ == "__main__":
    main()
