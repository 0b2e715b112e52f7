"""Epoch-level training driver for :class:`FeedforwardNetwork`."""

from __future__ import annotations

from typing import Iterable, Mapping, Sequence

import numpy as np

from ..core.network import FeedforwardNetwork
from ..core.types import Example, TrainingResult
from .metrics import evaluate


class Trainer:
    """Present examples one at a time and stop on accuracy, error or epoch limits.

    Callbacks receive ``on_epoch(epoch, metrics)`` after every evaluation.  A
    callback returning ``True`` asks the trainer to stop after that epoch.
    """

    def __init__(
        self,
        network: FeedforwardNetwork,
        callbacks: Sequence[object] | None = None,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self._cursor = 0

    def set_learning_rate(self, rate: float) -> None:
        self.network.set_learning_rate(rate)

    # ------------------------------------------------------------------
    # Online stepping

    def train_epoch(self, examples: Iterable[Example]) -> float:
        """One pass over ``examples`` in order; returns the mean example error."""

        errors = [self.network.train(ex.inputs, ex.targets) for ex in examples]
        if not errors:
            raise ValueError("Cannot train on an empty dataset")
        return float(np.mean(errors))

    def train_dataset(self, examples: Iterable[Example], epochs: int = 100) -> float:
        """Run ``epochs`` passes and return the mean error of the last one."""

        examples = list(examples)
        loss = 0.0
        for _ in range(epochs):
            loss = self.train_epoch(examples)
        return loss

    def train_next(self, examples: Sequence[Example]) -> tuple[Example, float]:
        """Train on the example under the cursor, then advance the cursor."""

        if not examples:
            raise ValueError("Cannot train on an empty dataset")
        self._cursor %= len(examples)
        example = examples[self._cursor]
        error = self.network.train(example.inputs, example.targets)
        self._cursor = (self._cursor + 1) % len(examples)
        return example, error

    def rewind(self) -> None:
        self._cursor = 0

    # ------------------------------------------------------------------
    # Epoch loop

    def run(
        self,
        dataset: Iterable[Example],
        max_epochs: int,
        *,
        target_accuracy: float | None = None,
        target_error: float | None = None,
        eval_every: int = 1,
        metric_names: Sequence[str] = (),
    ) -> TrainingResult:
        if max_epochs < 0:
            raise ValueError("max_epochs must be non-negative")
        examples = list(dataset)
        if not examples:
            raise ValueError("Cannot train on an empty dataset")
        eval_every = max(1, int(eval_every))

        steps = 0
        completed = 0
        reason = "max_epochs"
        metrics: Mapping[str, float] = {}
        for epoch in range(1, max_epochs + 1):
            loss = self.train_epoch(examples)
            steps += len(examples)
            completed = epoch
            if epoch % eval_every and epoch != max_epochs:
                continue
            metrics = {"loss": loss, **evaluate(self.network, examples, metric_names)}
            if self._emit_epoch(epoch, metrics):
                reason = "callback"
                break
            if target_accuracy is not None and metrics["accuracy"] >= target_accuracy:
                reason = "target_accuracy"
                break
            if target_error is not None and metrics["error"] <= target_error:
                reason = "target_error"
                break

        if not metrics:
            scored = evaluate(self.network, examples, metric_names)
            metrics = {"loss": scored["error"], **scored}
        return TrainingResult(
            epochs=completed,
            steps=steps,
            final_loss=float(metrics["loss"]),
            final_accuracy=float(metrics["accuracy"]),
            stopped_early=completed < max_epochs,
            reason=reason,
        )

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> bool:
        stop = False
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                result = callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                result = callback(epoch, metrics)
            else:
                continue
            stop = stop or result is True
        return stop


__all__ = ["Trainer"]
