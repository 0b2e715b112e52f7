"""Core typing contracts for backpropviz."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True)
class Example:
    """A single ``inputs -> targets`` training pair."""

    inputs: Tuple[float, ...]
    targets: Tuple[float, ...]
    label: str = ""


@dataclass(frozen=True)
class ModelDescription:
    """Description of the feed-forward network architecture."""

    layer_sizes: List[int]
    parameter_count: int


@dataclass(frozen=True)
class TrainingResult:
    """Summary returned by :meth:`backpropviz.training.trainer.Trainer.run`."""

    epochs: int
    steps: int
    final_loss: float
    final_accuracy: float
    stopped_early: bool
    reason: str


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`backpropviz.training.pipelines.run_pipeline`."""

    epochs: int
    accuracy: float
    loss: float
    metrics_path: str
    manifest_path: str
    summary_path: str = ""
