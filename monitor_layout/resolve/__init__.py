"""Resolution stages: densities, physical placement, canvas normalization."""

from monitor_layout.resolve.density import resolve_densities
from monitor_layout.resolve.layout import (
    LayoutResolution,
    PhysicalRect,
    PlacedComponent,
    find_roots,
    place_subject,
    resolve_positions,
)
from monitor_layout.resolve.normalize import (
    bounding_box,
    normalize_layout,
    round_half_up,
)

__all__ = [
    "LayoutResolution",
    "PhysicalRect",
    "PlacedComponent",
    "bounding_box",
    "find_roots",
    "normalize_layout",
    "place_subject",
    "resolve_densities",
    "resolve_positions",
    "round_half_up",
]
