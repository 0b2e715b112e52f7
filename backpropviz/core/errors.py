"""Exception hierarchy for backpropviz."""

from __future__ import annotations


class BackpropVizError(Exception):
    """Base class for all errors raised by backpropviz."""


class ConfigurationError(BackpropVizError, ValueError):
    """Raised when a network or run configuration is invalid."""


class InputShapeError(BackpropVizError, ValueError):
    """Raised when an input or target vector does not match a layer width."""


__all__ = ["BackpropVizError", "ConfigurationError", "InputShapeError"]
