"""Training driver, metrics and preset pipelines."""

from .metrics import evaluate, mean_squared_error, prediction_correct
from .pipelines import load_preset, presets, run_pipeline
from .trainer import Trainer

__all__ = [
    "Trainer",
    "evaluate",
    "load_preset",
    "mean_squared_error",
    "prediction_correct",
    "presets",
    "run_pipeline",
]
