"""Layout normalizer -- center a physical layout on the export canvas.

The bounding box of all rectangles is computed, its center is translated
onto the canvas center, and only then are positions rounded.

Rounding is half-up (``floor(v * 10**n + 0.5) / 10**n``), the same as the
JavaScript ``Math.round`` the layout consumer uses.
"""

from __future__ import annotations

import math
from types import MappingProxyType
from typing import Mapping

import numpy as np

from monitor_layout.resolve.layout import PhysicalRect

# Default export canvas, inches
CANVAS_WIDTH_IN = 144.0
CANVAS_HEIGHT_IN = 96.0
POSITION_DECIMALS = 4


def round_half_up(value: float, decimals: int) -> float:
    """Round *value* to *decimals* places, halves toward +inf."""
    factor = 10.0 ** decimals
    return math.floor(value * factor + 0.5) / factor


def bounding_box(rects: Mapping[int, PhysicalRect]) -> tuple[float, float, float, float]:
    """``(min_x, min_y, max_x, max_y)`` over all rectangles."""
    if not rects:
        raise ValueError("bounding_box requires at least one rectangle")
    arr = np.array([(r.x, r.y, r.right, r.bottom) for r in rects.values()], dtype=np.float64)
    return (
        float(arr[:, 0].min()),
        float(arr[:, 1].min()),
        float(arr[:, 2].max()),
        float(arr[:, 3].max()),
    )


def normalize_layout(
    rects: Mapping[int, PhysicalRect],
    canvas: tuple[float, float] = (CANVAS_WIDTH_IN, CANVAS_HEIGHT_IN),
    decimals: int = POSITION_DECIMALS,
) -> Mapping[int, PhysicalRect]:
    """Translate *rects* so their bounding box is centered on *canvas*.

    Parameters
    ----------
    rects : Mapping[int, PhysicalRect]
        Resolved layout in inches.
    canvas : tuple[float, float]
        Canvas ``(width, height)`` in inches.
    decimals : int
        Decimal places kept on ``x`` and ``y``.  Sizes are not rounded.

    Returns
    -------
    Mapping[int, PhysicalRect]
        Read-only, same keys and iteration order as *rects*.  Empty input
        gives an empty mapping.
    """
    if not rects:
        return MappingProxyType({})

    min_x, min_y, max_x, max_y = bounding_box(rects)
    dx = canvas[0] / 2.0 - (min_x + max_x) / 2.0
    dy = canvas[1] / 2.0 - (min_y + max_y) / 2.0

    out: dict[int, PhysicalRect] = {}
    for mid, rect in rects.items():
        moved = rect.translated(dx, dy)
        out[mid] = PhysicalRect(
            round_half_up(moved.x, decimals),
            round_half_up(moved.y, decimals),
            moved.width,
            moved.height,
        )
    return MappingProxyType(out)
