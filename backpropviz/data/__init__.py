"""Dataset registry and built-in datasets."""

# Ensure built-in datasets register themselves when the package is imported.
from . import gates as _gates  # noqa: F401
from . import patterns as _patterns  # noqa: F401
from .registry import (
    DatasetSpec,
    DataSpec,
    available_datasets,
    get_dataset,
    make_examples,
    register_dataset,
)

__all__ = [
    "DataSpec",
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "make_examples",
    "register_dataset",
]
