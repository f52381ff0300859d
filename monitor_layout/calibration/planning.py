"""Calibration planning -- which pairs to measure, and in which direction.

The interactive procedure calibrates one unbound monitor against one
already-bound monitor at a time.  Starting from the primary display, the
closest unbound/bound pair (by OS desktop centers) is chosen next, which
keeps every measurement between physical neighbours and guarantees that
each reference is bound before it is used.

All distances are OS desktop **pixels**.
"""

from __future__ import annotations

import logging
import math
from typing import Sequence

from monitor_layout.graph.models import Monitor

logger = logging.getLogger(__name__)


def determine_bind_horizontal(m1: Monitor, m2: Monitor) -> bool:
    """``True`` when *m1* and *m2* sit side by side rather than stacked.

    Compares the overlap of the two desktop rectangles on each axis: a
    larger (or equal) vertical overlap means the monitors share rows, so
    they are bound left/right.
    """
    v_overlap = max(
        0,
        min(m1.position_y + m1.resolution_y, m2.position_y + m2.resolution_y)
        - max(m1.position_y, m2.position_y),
    )
    h_overlap = max(
        0,
        min(m1.position_x + m1.resolution_x, m2.position_x + m2.resolution_x)
        - max(m1.position_x, m2.position_x),
    )
    return v_overlap >= h_overlap


def compute_calibration_order(monitors: Sequence[Monitor]) -> list[tuple[int, int]]:
    """Greedy nearest-neighbour calibration order.

    Parameters
    ----------
    monitors : Sequence[Monitor]
        Discovered monitors.  The primary one (or the first, if none is
        flagged) starts out bound.

    Returns
    -------
    list[tuple[int, int]]
        ``(unbound_id, bound_id)`` pairs in calibration order.  Empty for
        fewer than two monitors.
    """
    if len(monitors) < 2:
        return []

    primary = next((i for i, m in enumerate(monitors) if m.is_primary), 0)
    bound = [False] * len(monitors)
    bound[primary] = True
    centers = [m.pixel_center for m in monitors]

    pairs: list[tuple[int, int]] = []
    while not all(bound):
        best: tuple[float, int, int] | None = None
        for i, ci in enumerate(centers):
            if bound[i]:
                continue
            for j, cj in enumerate(centers):
                if not bound[j]:
                    continue
                dist = math.dist(ci, cj)
                if best is None or dist < best[0]:
                    best = (dist, i, j)

        _, unbound_idx, bound_idx = best
        bound[unbound_idx] = True
        pairs.append((monitors[unbound_idx].id, monitors[bound_idx].id))
        logger.debug(
            "Calibrate monitor %d against %d (%.0f px apart)",
            monitors[unbound_idx].id, monitors[bound_idx].id, best[0],
        )

    return pairs


def format_calibration_plan(
    monitors: Sequence[Monitor],
    pairs: Sequence[tuple[int, int]],
) -> str:
    """Human-readable plan, one step per line."""
    by_id = {m.id: m for m in monitors}
    lines = []
    for step, (unbound_id, bound_id) in enumerate(pairs, start=1):
        unbound, ref = by_id[unbound_id], by_id[bound_id]
        axis = "side by side" if determine_bind_horizontal(unbound, ref) else "stacked"
        lines.append(
            f"{step}. monitor {unbound_id} ({unbound.display_name or 'unnamed'}) "
            f"against {bound_id} ({ref.display_name or 'unnamed'}), {axis}"
        )
    return "\n".join(lines)
