"""Dense sigmoid network trained with online backpropagation.

The network owns every array it touches.  Weights, biases, activations and
gradients are allocated once at construction and overwritten in place by
:meth:`FeedforwardNetwork.forward`, :meth:`FeedforwardNetwork.backward` and
:meth:`FeedforwardNetwork.reset`, so the arrays handed out by the ``get_*``
accessors stay valid views of the live state.
"""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .activations import sigmoid, sigmoid_derivative
from .errors import ConfigurationError, InputShapeError
from .types import Array, ModelDescription

DEFAULT_LEARNING_RATE = 0.5
BIAS_RANGE = 0.25


def xavier_limit(fan_in: int, fan_out: int) -> float:
    """Return the Glorot-uniform bound ``sqrt(6 / (fan_in + fan_out))``."""

    return math.sqrt(6.0 / (fan_in + fan_out))


def _validate_layer_sizes(layer_sizes: Sequence[int]) -> Tuple[int, ...]:
    try:
        sizes = list(layer_sizes)
    except TypeError as exc:
        raise ConfigurationError("layer_sizes must be a sequence of integers") from exc
    if len(sizes) < 2:
        raise ConfigurationError(
            f"A network needs at least an input and an output layer, got {sizes!r}"
        )
    widths = []
    for idx, size in enumerate(sizes):
        if isinstance(size, bool):
            raise ConfigurationError(f"Layer {idx} width must be an integer, got {size!r}")
        try:
            width = operator.index(size)
        except TypeError as exc:
            raise ConfigurationError(
                f"Layer {idx} width must be an integer, got {size!r}"
            ) from exc
        if width < 1:
            raise ConfigurationError(f"Layer {idx} width must be positive, got {width}")
        widths.append(width)
    return tuple(widths)


def _as_vector(values: Sequence[float], width: int, name: str) -> Array:
    try:
        vector = np.asarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InputShapeError(f"{name} must be a flat numeric vector") from exc
    if vector.ndim != 1 or vector.shape[0] != width:
        raise InputShapeError(
            f"Expected {name} of length {width}, got shape {vector.shape}"
        )
    return vector


@dataclass(eq=False)
class FeedforwardNetwork:
    """Fully connected network with sigmoid units and a squared-error objective.

    ``weights[l]`` has shape ``(layer_sizes[l], layer_sizes[l + 1])`` and is
    indexed ``[from][to]``.  ``gradients[l]`` holds the error signal of layer
    ``l + 1`` from the most recent :meth:`backward` call.
    """

    layer_sizes: Sequence[int]
    learning_rate: float = DEFAULT_LEARNING_RATE
    seed: int | None = None
    weights: List[Array] = field(init=False, repr=False)
    biases: List[Array] = field(init=False, repr=False)
    activations: List[Array] = field(init=False, repr=False)
    gradients: List[Array] = field(init=False, repr=False)
    epoch: int = field(init=False, default=0)
    last_error: float = field(init=False, default=0.0)

    def __post_init__(self) -> None:
        sizes = _validate_layer_sizes(self.layer_sizes)
        self.layer_sizes = sizes
        self._rng = np.random.default_rng(self.seed)
        pairs = list(zip(sizes[:-1], sizes[1:]))
        self.weights = [np.empty((fan_in, fan_out)) for fan_in, fan_out in pairs]
        self.biases = [np.empty(fan_out) for _, fan_out in pairs]
        self.activations = [np.zeros(width) for width in sizes]
        self.gradients = [np.zeros(width) for width in sizes[1:]]
        self._initialise()

    # ------------------------------------------------------------------
    # State management

    def _initialise(self) -> None:
        for W, b in zip(self.weights, self.biases):
            limit = xavier_limit(*W.shape)
            W[...] = self._rng.uniform(-limit, limit, size=W.shape)
            b[...] = self._rng.uniform(-BIAS_RANGE, BIAS_RANGE, size=b.shape)

    def reset(self) -> None:
        """Redraw every parameter and clear activations, gradients and counters."""

        self._initialise()
        for a in self.activations:
            a.fill(0.0)
        for g in self.gradients:
            g.fill(0.0)
        self.epoch = 0
        self.last_error = 0.0

    def set_learning_rate(self, rate: float) -> None:
        self.learning_rate = float(rate)

    # ------------------------------------------------------------------
    # Propagation

    @property
    def depth(self) -> int:
        """Number of weight transitions."""

        return len(self.weights)

    def forward(self, inputs: Sequence[float]) -> Array:
        """Propagate ``inputs`` and return the live output activation vector."""

        x = _as_vector(inputs, self.layer_sizes[0], "inputs")
        return self._forward(x)

    def _forward(self, x: Array) -> Array:
        self.activations[0][:] = x
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            z = b + self.activations[idx] @ W
            sigmoid(z, out=self.activations[idx + 1])
        return self.activations[-1]

    def backward(self, targets: Sequence[float]) -> None:
        """Backpropagate against the activations left by the last forward pass."""

        t = _as_vector(targets, self.layer_sizes[-1], "targets")
        self._backward(t)

    def _backward(self, t: Array) -> None:
        output = self.activations[-1]
        np.multiply(t - output, sigmoid_derivative(output), out=self.gradients[-1])
        for layer in range(self.depth - 1, 0, -1):
            error = self.weights[layer] @ self.gradients[layer]
            np.multiply(
                error,
                sigmoid_derivative(self.activations[layer]),
                out=self.gradients[layer - 1],
            )
        # all gradients are final before any parameter moves
        lr = self.learning_rate
        for idx, (W, b) in enumerate(zip(self.weights, self.biases)):
            W += lr * np.outer(self.activations[idx], self.gradients[idx])
            b += lr * self.gradients[idx]

    def train(self, inputs: Sequence[float], targets: Sequence[float]) -> float:
        """Run one online update and return the pre-update squared error."""

        x = _as_vector(inputs, self.layer_sizes[0], "inputs")
        t = _as_vector(targets, self.layer_sizes[-1], "targets")
        output = self._forward(x)
        error = float(np.mean(np.square(t - output)))
        self._backward(t)
        self.last_error = error
        self.epoch += 1
        return error

    def predict(self, inputs: Sequence[float]) -> Array:
        return self.forward(inputs)

    def classify(self, inputs: Sequence[float]) -> int:
        """Index of the strongest output unit; the lowest index wins ties."""

        return int(np.argmax(self.forward(inputs)))

    # ------------------------------------------------------------------
    # Introspection

    def get_layer_sizes(self) -> Tuple[int, ...]:
        return self.layer_sizes

    def get_weights(self) -> List[Array]:
        return self.weights

    def get_biases(self) -> List[Array]:
        return self.biases

    def get_activations(self) -> List[Array]:
        return self.activations

    def get_gradients(self) -> List[Array]:
        return self.gradients

    def parameter_count(self) -> int:
        return int(sum(W.size + b.size for W, b in zip(self.weights, self.biases)))

    def describe(self) -> ModelDescription:
        return ModelDescription(
            layer_sizes=list(self.layer_sizes),
            parameter_count=self.parameter_count(),
        )


__all__ = ["FeedforwardNetwork", "DEFAULT_LEARNING_RATE", "BIAS_RANGE", "xavier_limit"]
