"""Core numerical primitives for backpropviz."""

from . import activations, errors, network, types
from .errors import BackpropVizError, ConfigurationError, InputShapeError
from .network import FeedforwardNetwork

__all__ = [
    "activations",
    "errors",
    "network",
    "types",
    "BackpropVizError",
    "ConfigurationError",
    "InputShapeError",
    "FeedforwardNetwork",
]
