"""5x5 pixel glyphs with one-hot class targets."""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

import numpy as np

from .registry import DatasetSpec, DataSpec, make_examples, register_dataset

GRID = 5

GLYPHS: Dict[str, List[str]] = {
    "O": [
        "01110",
        "10001",
        "10001",
        "10001",
        "01110",
    ],
    "X": [
        "10001",
        "01010",
        "00100",
        "01010",
        "10001",
    ],
    "T": [
        "11111",
        "00100",
        "00100",
        "00100",
        "00100",
    ],
    "L": [
        "10000",
        "10000",
        "10000",
        "10000",
        "11111",
    ],
}


def glyph_pixels(rows: Sequence[str]) -> Tuple[float, ...]:
    """Flatten a row-major glyph drawing into ``GRID * GRID`` pixel values."""

    if len(rows) != GRID or any(len(row) != GRID for row in rows):
        raise ValueError(f"Glyphs must be {GRID}x{GRID}, got {list(rows)!r}")
    return tuple(float(ch == "1") for row in rows for ch in row)


def render(pixels: Sequence[float], on: str = "#", off: str = ".") -> str:
    """Render pixels back into a text grid, thresholding at 0.5."""

    cells = [on if value >= 0.5 else off for value in pixels]
    return "\n".join("".join(cells[r * GRID : (r + 1) * GRID]) for r in range(GRID))


def _one_hot(index: int, size: int) -> Tuple[float, ...]:
    return tuple(1.0 if i == index else 0.0 for i in range(size))


def _factory(
    *,
    glyphs: Sequence[str] | None = None,
    noisy_copies: int = 0,
    noise: float = 0.08,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    names = list(glyphs) if glyphs is not None else list(GLYPHS)
    unknown = [name for name in names if name not in GLYPHS]
    if unknown:
        raise KeyError(f"Unknown glyphs: {unknown}. Available glyphs: {sorted(GLYPHS)}")
    if not 0.0 <= noise <= 1.0:
        raise ValueError("noise must be in [0, 1]")
    if noisy_copies < 0:
        raise ValueError("noisy_copies must be non-negative")

    rng = np.random.default_rng(seed)
    rows = []
    labels = []
    for idx, name in enumerate(names):
        pixels = glyph_pixels(GLYPHS[name])
        rows.append((pixels, _one_hot(idx, len(names))))
        labels.append(name)
    # noisy copies follow the clean glyphs so the first pass is always canonical
    for copy in range(noisy_copies):
        for idx, name in enumerate(names):
            clean = np.asarray(glyph_pixels(GLYPHS[name]))
            flips = rng.random(clean.shape) < noise
            noisy = np.where(flips, 1.0 - clean, clean)
            rows.append((tuple(noisy.tolist()), _one_hot(idx, len(names))))
            labels.append(f"{name}~{copy}")

    return DatasetSpec(
        name="patterns",
        examples=make_examples(rows, labels),
        data_spec=DataSpec(
            d_in=GRID * GRID,
            d_out=len(names),
            task_type="multiclass",
            num_classes=len(names),
            labels=tuple(names),
        ),
        provenance={
            "type": "pixel_patterns",
            "grid": GRID,
            "glyphs": names,
            "noisy_copies": noisy_copies,
            "noise": noise,
            "seed": seed,
        },
    )


register_dataset("patterns", _factory)
