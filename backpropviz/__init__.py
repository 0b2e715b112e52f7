"""backpropviz public API."""

from .core import activations  # noqa: F401
from .core import types  # noqa: F401
from .core.errors import BackpropVizError, ConfigurationError, InputShapeError
from .core.network import FeedforwardNetwork
from .data import available_datasets, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__version__ = "0.1.0"

__all__ = [
    "BackpropVizError",
    "ConfigurationError",
    "FeedforwardNetwork",
    "InputShapeError",
    "Trainer",
    "activations",
    "available_datasets",
    "get_dataset",
    "load_preset",
    "presets",
    "run_pipeline",
    "types",
]
