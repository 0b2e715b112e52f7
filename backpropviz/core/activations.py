"""Activation utilities for backpropviz."""

from __future__ import annotations

import numpy as np

from .types import Array

# exp(500) is still finite in float64
CLIP = 500.0


def sigmoid(x: Array, out: Array | None = None) -> Array:
    """Return the logistic sigmoid of ``x`` with the exponent clipped to ``±CLIP``."""

    z = np.clip(x, -CLIP, CLIP)
    return np.divide(1.0, 1.0 + np.exp(-z), out=out)


def sigmoid_derivative(a: Array) -> Array:
    """Derivative of the sigmoid expressed through its own output ``a``."""

    return a * (1.0 - a)
