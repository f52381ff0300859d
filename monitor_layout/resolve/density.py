"""Density resolver -- propagate pixels-per-inch through the graph.

Every monitor with a known ppi seeds a worklist.  Popping a resolved node
relaxes its measurements in both directions::

    subject = bound * scale
    bound   = subject / scale

A node is resolved at most once, so the walk is O(V + E) and reaches the
same fixed point as repeated full passes over the measurement list.
Monitors in components without a seed are simply absent from the result.
"""

from __future__ import annotations

import logging
from collections import deque
from types import MappingProxyType
from typing import Mapping

from monitor_layout.graph.models import MeasurementGraph

logger = logging.getLogger(__name__)


def resolve_densities(graph: MeasurementGraph) -> Mapping[int, float]:
    """Resolve the density of every monitor reachable from a seeded node.

    Parameters
    ----------
    graph : MeasurementGraph
        Monitor and measurement snapshot.

    Returns
    -------
    Mapping[int, float]
        Read-only ``monitor id -> ppi``.  Empty when no monitor has a known
        density.
    """
    densities: dict[int, float] = {}
    queue: deque[int] = deque()

    for mid in graph.monitor_ids:
        monitor = graph.monitor(mid)
        if monitor.has_known_density:
            densities[mid] = float(monitor.ppi)
            queue.append(mid)

    if not densities:
        logger.info("No monitor has a known density; nothing to resolve")
        return MappingProxyType({})

    while queue:
        node = queue.popleft()
        known = densities[node]
        for edge in graph.edges(node):
            if edge.neighbor in densities:
                continue
            scale = edge.measurement.scale
            densities[edge.neighbor] = known * scale if edge.from_bound else known / scale
            queue.append(edge.neighbor)

    unresolved = [mid for mid in graph.monitor_ids if mid not in densities]
    if unresolved:
        logger.debug("Densities unresolved for monitors %s", unresolved)
    logger.debug("Resolved %d/%d densities", len(densities), len(graph.monitor_ids))

    return MappingProxyType(densities)
