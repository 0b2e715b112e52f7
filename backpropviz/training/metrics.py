"""Metric helpers for the training driver."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, Sequence

import numpy as np

from ..core.network import FeedforwardNetwork
from ..core.types import Array, Example


@dataclass(frozen=True)
class MetricResult:
    name: str
    value: float


def default_metrics(task_type: str) -> List[str]:
    if task_type == "binary":
        return ["accuracy", "mae"]
    if task_type == "multiclass":
        return ["accuracy", "mse"]
    raise ValueError(f"Unknown task type: {task_type}")


def mean_squared_error(predictions: Array, targets: Array) -> float:
    """Mean of the squared differences over every output unit."""

    diff = np.asarray(targets, dtype=np.float64) - np.asarray(predictions, dtype=np.float64)
    return float(np.mean(np.square(diff)))


def _correct_mask(predictions: Array, targets: Array) -> Array:
    if predictions.shape[1] == 1:
        return (predictions[:, 0] >= 0.5) == (targets[:, 0] >= 0.5)
    return np.argmax(predictions, axis=1) == np.argmax(targets, axis=1)


def prediction_correct(output: Sequence[float], targets: Sequence[float]) -> bool:
    """Single outputs are rounded at 0.5; wider outputs are compared by argmax."""

    preds = np.asarray(output, dtype=np.float64).reshape(1, -1)
    targs = np.asarray(targets, dtype=np.float64).reshape(1, -1)
    return bool(_correct_mask(preds, targs)[0])


def compute_metric(name: str, predictions: Array, targets: Array) -> MetricResult:
    key = name.lower()
    if key == "mse":
        value = mean_squared_error(predictions, targets)
    elif key == "rmse":
        value = float(np.sqrt(mean_squared_error(predictions, targets)))
    elif key == "mae":
        value = float(np.mean(np.abs(targets - predictions)))
    elif key == "accuracy":
        value = float(np.mean(_correct_mask(predictions, targets)))
    else:
        raise KeyError(f"Unknown metric: {name}")
    return MetricResult(name=key, value=value)


def compute_metrics(
    names: Iterable[str], predictions: Array, targets: Array
) -> Mapping[str, float]:
    results: Dict[str, float] = {}
    for name in names:
        metric = compute_metric(name, predictions, targets)
        results[metric.name] = metric.value
    return results


def collect_predictions(
    network: FeedforwardNetwork, examples: Iterable[Example]
) -> tuple[Array, Array]:
    """Run every example forward and stack ``(predictions, targets)``."""

    preds: list[Array] = []
    targets: list[Sequence[float]] = []
    for example in examples:
        # forward() hands back the live buffer, so copy before the next call
        preds.append(network.predict(example.inputs).copy())
        targets.append(example.targets)
    return np.vstack(preds), np.asarray(targets, dtype=np.float64)


def evaluate(
    network: FeedforwardNetwork,
    examples: Iterable[Example],
    names: Sequence[str] = (),
) -> Mapping[str, float]:
    """Score ``network`` on ``examples`` without updating it.

    Always reports ``accuracy`` and ``error`` (the mean per-example MSE), plus
    any extra metric listed in ``names``.
    """

    predictions, targets = collect_predictions(network, examples)
    results = {
        "accuracy": float(np.mean(_correct_mask(predictions, targets))),
        "error": mean_squared_error(predictions, targets),
    }
    results.update(compute_metrics(names, predictions, targets))
    return results


__all__ = [
    "MetricResult",
    "collect_predictions",
    "compute_metric",
    "compute_metrics",
    "default_metrics",
    "evaluate",
    "mean_squared_error",
    "prediction_correct",
]
