"""Layout resolver -- place every monitor in physical space (inches).

Each connected component is anchored at its *root*: the single monitor
with a resolved density that is never the subject of a measurement.  The
root sits at the origin and placement walks bound -> subject through a
worklist, so the order measurements were recorded in does not matter.

For a measurement binding *subject* to an already placed *bound*::

    gap   = |gap_px| / ppi(bound)
    align = align_bound / ppi(bound) - align_unbound / ppi(subject)

Side by side (``bind_horizontal``), the subject goes left of the bound
monitor when its OS ``position_x`` is smaller, otherwise right; ``y`` is
the bound ``y`` shifted by the alignment.  Stacked pairs swap the axes and
use ``position_y``.

Components with no root, or with more than one, are left out of the
result and logged.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from monitor_layout.graph.models import CalibrationMeasurement, MeasurementGraph

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PhysicalRect:
    """Axis-aligned monitor rectangle in inches (y grows downwards)."""

    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    def translated(self, dx: float, dy: float) -> "PhysicalRect":
        return PhysicalRect(self.x + dx, self.y + dy, self.width, self.height)


@dataclass(frozen=True)
class PlacedComponent:
    """Placement of one connected component, anchored at its root."""

    root: int
    rects: Mapping[int, PhysicalRect]

    def __len__(self) -> int:
        return len(self.rects)


@dataclass(frozen=True)
class LayoutResolution:
    """All components that could be placed, plus the merged id mapping.

    Components are kept separate because each one lives in its own
    coordinate frame: two roots both sit at the origin.
    """

    components: tuple[PlacedComponent, ...]

    @property
    def rects(self) -> Mapping[int, PhysicalRect]:
        merged: dict[int, PhysicalRect] = {}
        for component in self.components:
            merged.update(component.rects)
        return MappingProxyType(merged)

    def primary(self) -> PlacedComponent | None:
        """Largest component; ties go to the one resolved first."""
        if not self.components:
            return None
        return max(self.components, key=len)

    def __bool__(self) -> bool:
        return bool(self.components)


# ---------------------------------------------------------------------------
# Placement
# ---------------------------------------------------------------------------


def _size(graph: MeasurementGraph, mid: int, ppi: float) -> tuple[float, float]:
    monitor = graph.monitor(mid)
    return monitor.resolution_x / ppi, monitor.resolution_y / ppi


def place_subject(
    graph: MeasurementGraph,
    measurement: CalibrationMeasurement,
    bound_rect: PhysicalRect,
    densities: Mapping[int, float],
) -> PhysicalRect:
    """Position the measurement's subject next to its placed bound monitor."""
    subject = graph.monitor(measurement.monitor_id)
    bound = graph.monitor(measurement.bound_to)
    ppi_bound = densities[bound.id]
    ppi_subject = densities[subject.id]

    width, height = _size(graph, subject.id, ppi_subject)
    gap = abs(measurement.gap) / ppi_bound
    align = (
        measurement.align_offset_bound / ppi_bound
        - measurement.align_offset_unbound / ppi_subject
    )

    if measurement.bind_horizontal:
        if subject.position_x < bound.position_x:
            x = bound_rect.x - width - gap
        else:
            x = bound_rect.right + gap
        y = bound_rect.y + align
    else:
        if subject.position_y < bound.position_y:
            y = bound_rect.y - height - gap
        else:
            y = bound_rect.bottom + gap
        x = bound_rect.x + align

    return PhysicalRect(x, y, width, height)


def find_roots(
    graph: MeasurementGraph,
    densities: Mapping[int, float],
    component: tuple[int, ...],
) -> list[int]:
    """Monitors of *component* with a density that are never a subject."""
    subjects = graph.subject_ids()
    return [mid for mid in component if mid in densities and mid not in subjects]


def _place_component(
    graph: MeasurementGraph,
    densities: Mapping[int, float],
    root: int,
) -> PlacedComponent:
    width, height = _size(graph, root, densities[root])
    rects: dict[int, PhysicalRect] = {root: PhysicalRect(0.0, 0.0, width, height)}
    queue: deque[int] = deque([root])

    while queue:
        node = queue.popleft()
        for edge in graph.edges(node):
            # Positions only flow from a bound monitor to its subjects
            if not edge.from_bound or edge.neighbor in rects:
                continue
            if edge.neighbor not in densities:
                continue
            rects[edge.neighbor] = place_subject(
                graph, edge.measurement, rects[node], densities
            )
            queue.append(edge.neighbor)

    return PlacedComponent(root=root, rects=MappingProxyType(rects))


def resolve_positions(
    graph: MeasurementGraph,
    densities: Mapping[int, float],
) -> LayoutResolution:
    """Resolve physical rectangles for every component with a unique root.

    Parameters
    ----------
    graph : MeasurementGraph
        Monitor and measurement snapshot.
    densities : Mapping[int, float]
        Output of :func:`resolve_densities`.

    Returns
    -------
    LayoutResolution
        Falsy when nothing could be placed.
    """
    placed: list[PlacedComponent] = []

    for component in graph.components():
        if not any(mid in densities for mid in component):
            continue
        roots = find_roots(graph, densities, component)
        if len(roots) != 1:
            logger.warning(
                "Component %s has %d root candidates %s; leaving it unresolved",
                list(component), len(roots), roots,
            )
            continue

        result = _place_component(graph, densities, roots[0])
        missing = [mid for mid in component if mid not in result.rects]
        if missing:
            logger.warning(
                "Monitors %s are not reachable from root %d", missing, roots[0]
            )
        placed.append(result)

    logger.debug(
        "Placed %d monitor(s) in %d component(s)",
        sum(len(c) for c in placed), len(placed),
    )
    return LayoutResolution(components=tuple(placed))
