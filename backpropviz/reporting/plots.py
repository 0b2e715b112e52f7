"""Headless-safe plotting adapters."""

from __future__ import annotations

from pathlib import Path
from typing import List, Tuple


class PlotAdapter:
    """Collect per-epoch loss and accuracy and optionally emit a matplotlib figure."""

    def __init__(self, run_dir: str | Path, enable_plots: bool = False):
        self.enable_plots = enable_plots
        self.run_dir = Path(run_dir)
        self._history: List[Tuple[int, float, float]] = []
        if self.enable_plots:
            self.run_dir.mkdir(parents=True, exist_ok=True)

    def on_epoch(self, epoch: int, metrics) -> None:
        if not self.enable_plots:
            return
        loss = float(metrics.get("loss", 0.0))
        accuracy = float(metrics.get("accuracy", 0.0))
        self._history.append((epoch, loss, accuracy))

    def close(self) -> Path | None:
        if not self.enable_plots or not self._history:
            return None
        import matplotlib

        matplotlib.use("Agg", force=True)
        import matplotlib.pyplot as plt  # imported lazily for headless safety

        epochs, losses, accuracies = zip(*self._history)
        fig, (ax_loss, ax_acc) = plt.subplots(2, 1, sharex=True)
        ax_loss.plot(epochs, losses)
        ax_loss.set_ylabel("Mean squared error")
        ax_loss.set_title("Training Curve")
        ax_acc.plot(epochs, accuracies, color="tab:green")
        ax_acc.set_ylim(-0.05, 1.05)
        ax_acc.set_xlabel("Epoch")
        ax_acc.set_ylabel("Accuracy")
        plot_path = self.run_dir / "loss.png"
        fig.savefig(plot_path)
        plt.close(fig)
        return plot_path

    __call__ = on_epoch
