"""Headless-safe plotting adapters."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Mapping, Tuple

logger = logging.getLogger(__name__)


class PlotAdapter:
    """Collect per-epoch accuracy and cost and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        if not self.enable_plots or "accuracy" not in metrics:
            return
        cost = float(metrics.get("cost", float("nan")))
        self._history.append((epoch, float(metrics["accuracy"]), cost))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, accuracies, costs = zip(*self._history)
        fig, (acc_ax, cost_ax) = plt.subplots(2, 1, sharex=True)
        acc_ax.plot(epochs, accuracies, marker="o")
        acc_ax.set_ylabel("Accuracy")
        acc_ax.set_ylim(0.0, 1.0)
        acc_ax.set_title("Test Metrics")
        cost_ax.plot(epochs, costs, color="tab:red")
        cost_ax.set_xlabel("Epoch")
        cost_ax.set_ylabel("Cost")
        plot_path = self.run_dir / "accuracy.png"
        fig.savefig(plot_path)
        plt.close(fig)
        logger.info("Wrote %s", plot_path)
        return plot_path

    __call__ = on_epoch
