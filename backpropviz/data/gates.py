"""Two-input logic gate truth tables."""

from __future__ import annotations

from typing import Callable

from .registry import DatasetSpec, DataSpec, make_examples, register_dataset

_INPUTS = ((0, 0), (0, 1), (1, 0), (1, 1))

TRUTH_TABLES = {
    "xor": (0, 1, 1, 0),
    "and": (0, 0, 0, 1),
    "or": (0, 1, 1, 1),
    "nand": (1, 1, 1, 0),
}

DESCRIPTIONS = {
    "xor": "Output is 1 only when the inputs differ. Not linearly separable, "
    "so it needs a hidden layer.",
    "and": "Output is 1 only when both inputs are 1. Linearly separable.",
    "or": "Output is 1 when either input is 1. Linearly separable.",
    "nand": "Output is 0 only when both inputs are 1. Linearly separable.",
}


def _gate_factory(gate: str) -> Callable[..., DatasetSpec]:
    outputs = TRUTH_TABLES[gate]

    def _factory(**_: object) -> DatasetSpec:
        rows = [(inputs, (target,)) for inputs, target in zip(_INPUTS, outputs)]
        labels = [f"{a} {gate.upper()} {b}" for a, b in _INPUTS]
        return DatasetSpec(
            name=gate,
            examples=make_examples(rows, labels),
            data_spec=DataSpec(d_in=2, d_out=1, task_type="binary", labels=("0", "1")),
            provenance={
                "type": "logic_gate",
                "gate": gate,
                "description": DESCRIPTIONS[gate],
            },
        )

    _factory.__name__ = f"make_{gate}"
    return _factory


for _gate in TRUTH_TABLES:
    register_dataset(_gate, _gate_factory(_gate))
