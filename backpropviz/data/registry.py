"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Iterator, MutableMapping, Sequence, Tuple

import numpy as np

from ..core.types import Example


TaskTypes = "binary", "multiclass"


@dataclass(frozen=True)
class DataSpec:
    """Structural information about a dataset.

    Attributes
    ----------
    d_in:
        Width of every input vector.
    d_out:
        Width of every target vector.
    task_type:
        ``"binary"`` for a single thresholded output, ``"multiclass"`` for
        one-hot targets scored by argmax.
    num_classes:
        Number of classes for ``"multiclass"`` datasets.
    labels:
        Human readable class names, indexed like the output units.
    """

    d_in: int
    d_out: int
    task_type: str
    num_classes: int | None = None
    labels: Tuple[str, ...] = ()
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DatasetSpec:
    """An ordered collection of examples registered under ``name``."""

    name: str
    examples: Tuple[Example, ...]
    data_spec: DataSpec
    provenance: Dict[str, Any]

    def __len__(self) -> int:
        return len(self.examples)

    def __iter__(self) -> Iterator[Example]:
        return iter(self.examples)

    def as_arrays(self) -> tuple[np.ndarray, np.ndarray]:
        """Stack the examples into ``(inputs, targets)`` matrices."""

        inputs = np.array([ex.inputs for ex in self.examples], dtype=np.float64)
        targets = np.array([ex.targets for ex in self.examples], dtype=np.float64)
        return inputs, targets


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("xor")
        def make_xor(**kwargs):
            ...

    or directly::

        register_dataset("xor", make_xor)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    if name is None:
        raise TypeError("register_dataset requires a name when used without a decorator")
    return _decorator


def get_dataset(dataset: str, /, **options: Any) -> DatasetSpec:
    """Return the :class:`DatasetSpec` for ``dataset``."""

    if dataset not in _REGISTRY:
        available = ", ".join(sorted(_REGISTRY))
        raise KeyError(f"Unknown dataset {dataset!r}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def make_examples(
    rows: Sequence[tuple[Sequence[float], Sequence[float]]],
    labels: Sequence[str] | None = None,
) -> Tuple[Example, ...]:
    """Build immutable examples from ``(inputs, targets)`` rows."""

    names = list(labels) if labels is not None else [""] * len(rows)
    return tuple(
        Example(
            inputs=tuple(float(v) for v in inputs),
            targets=tuple(float(v) for v in targets),
            label=name,
        )
        for (inputs, targets), name in zip(rows, names)
    )


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.data_spec.task_type not in TaskTypes:
        raise ValueError(f"Invalid task type: {spec.data_spec.task_type}")
    if spec.data_spec.task_type == "multiclass" and spec.data_spec.num_classes is None:
        raise ValueError("Multiclass datasets must define num_classes")
    if not spec.examples:
        raise ValueError(f"Dataset {spec.name!r} has no examples")
    for idx, example in enumerate(spec.examples):
        if len(example.inputs) != spec.data_spec.d_in:
            raise ValueError(
                f"Example {idx} of {spec.name!r} has {len(example.inputs)} inputs, "
                f"expected {spec.data_spec.d_in}"
            )
        if len(example.targets) != spec.data_spec.d_out:
            raise ValueError(
                f"Example {idx} of {spec.name!r} has {len(example.targets)} targets, "
                f"expected {spec.data_spec.d_out}"
            )


__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "make_examples",
    "register_dataset",
]
