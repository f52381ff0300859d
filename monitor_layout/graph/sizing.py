"""Physical size helpers for monitors without a known pixel density.

The discovery collaborator usually supplies an EDID physical size in
millimetres.  When it does not, a diagonal can often be recovered from the
marketing name (``"DELL U2723QE 27"``).  These helpers turn either source
into a pixel density so the monitor can seed the density resolver.

All physical sizes are **millimetres** on input and output; diagonals are
**inches**.
"""

from __future__ import annotations

import dataclasses
import logging
import math
import re

from monitor_layout.graph.models import Monitor

logger = logging.getLogger(__name__)

MM_PER_INCH = 25.4
DEFAULT_ASPECT = 16.0 / 9.0

# Plausible desktop panel diagonals, in inches
DIAGONAL_RANGE_IN = (10, 65)

_DIAGONAL_RE = re.compile(r"(?<!\d)(\d{2})(?!\d)")


def density_from_physical_size(
    resolution_x: int,
    resolution_y: int,
    width_mm: float | None,
    height_mm: float | None,
) -> float | None:
    """Diagonal pixels divided by diagonal inches.

    Returns ``None`` when either physical dimension is missing or zero.
    """
    if not width_mm or not height_mm:
        return None
    diagonal_in = math.hypot(width_mm / MM_PER_INCH, height_mm / MM_PER_INCH)
    if diagonal_in <= 0:
        return None
    return math.hypot(resolution_x, resolution_y) / diagonal_in


def guess_diagonal_from_names(*names: str | None) -> float | None:
    """Return the first standalone two-digit number in range found in *names*.

    >>> guess_diagonal_from_names("", "LG 27GL850 27 inch")
    27.0
    """
    lo, hi = DIAGONAL_RANGE_IN
    for name in names:
        if not name:
            continue
        for match in _DIAGONAL_RE.finditer(name):
            value = int(match.group(1))
            if lo <= value <= hi:
                return float(value)
    return None


def physical_size_from_diagonal(
    resolution_x: int,
    resolution_y: int,
    diagonal_in: float,
) -> tuple[int, int]:
    """Width and height in whole millimetres for a panel of *diagonal_in*.

    Uses the pixel aspect ratio, falling back to 16:9 for a degenerate
    resolution.
    """
    if resolution_x > 0 and resolution_y > 0:
        aspect = resolution_x / resolution_y
    else:
        aspect = DEFAULT_ASPECT
    height_in = diagonal_in / math.sqrt(1.0 + aspect * aspect)
    width_in = height_in * aspect
    return round(width_in * MM_PER_INCH), round(height_in * MM_PER_INCH)


def complete_monitor(monitor: Monitor) -> Monitor:
    """Return *monitor* with a derived ``ppi`` when it has none.

    Order of preference: known ppi, EDID physical size, diagonal guessed
    from the friendly / monitor / adapter names.  A monitor with none of
    these is returned unchanged.
    """
    if monitor.has_known_density:
        return monitor

    width_mm = monitor.physical_width_mm
    height_mm = monitor.physical_height_mm
    source = monitor.size_source

    if not (width_mm and height_mm):
        diagonal = guess_diagonal_from_names(
            monitor.friendly_name, monitor.monitor_name, monitor.adapter_name
        )
        if diagonal is None:
            return monitor
        width_mm, height_mm = physical_size_from_diagonal(
            monitor.resolution_x, monitor.resolution_y, diagonal
        )
        source = "guessed"
        logger.info(
            "Monitor %d: guessed %.0f\" diagonal from its name", monitor.id, diagonal
        )
    elif source == "none":
        source = "edid"

    ppi = density_from_physical_size(
        monitor.resolution_x, monitor.resolution_y, width_mm, height_mm
    )
    if ppi is None:
        return monitor
    return dataclasses.replace(
        monitor,
        ppi=ppi,
        physical_width_mm=width_mm,
        physical_height_mm=height_mm,
        size_source=source,
    )
