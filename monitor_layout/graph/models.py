"""Measurement graph -- monitors, calibration measurements and their graph.

Every record is an immutable, slotted dataclass.  A ``Monitor`` is a node
carrying its pixel resolution and OS-reported logical position; a
``CalibrationMeasurement`` is a directed edge from a *subject* monitor to
the *bound* (reference) monitor it was calibrated against.

Units
-----
Resolutions, positions, gaps and alignment offsets are **pixels**.
Densities are **pixels per inch**.  Physical coordinates produced further
down the pipeline are **inches**.

Malformed measurements (self edges, non-positive scale, unknown endpoints)
are kept in the snapshot as supplied but never enter the adjacency list,
so every resolver skips them the same way.
"""

from __future__ import annotations

import logging
import math
from collections import deque
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Iterable, Literal, Mapping

logger = logging.getLogger(__name__)

ORIENTATION_LANDSCAPE = 0
ORIENTATION_ROTATED_90 = 1

SizeSource = Literal["edid", "guessed", "manual", "none"]


# ---------------------------------------------------------------------------
# Nodes and edges
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Monitor:
    """A display as reported by the discovery collaborator.

    Parameters
    ----------
    id : int
        Stable identity within one snapshot.
    resolution_x, resolution_y : int
        Native pixel resolution.
    position_x, position_y : int
        OS logical desktop position (pixels).  Only used to decide on which
        side of its reference a calibrated monitor sits.
    orientation : int
        ``0`` landscape, ``1`` rotated 90 degrees.
    ppi : float | None
        Known pixel density, if any.
    """

    id: int
    resolution_x: int
    resolution_y: int
    position_x: int = 0
    position_y: int = 0
    orientation: int = ORIENTATION_LANDSCAPE
    ppi: float | None = None
    friendly_name: str | None = None
    monitor_name: str | None = None
    device_name: str = ""
    adapter_name: str = ""
    is_primary: bool = False
    physical_width_mm: int | None = None
    physical_height_mm: int | None = None
    size_source: SizeSource = "none"

    @property
    def has_known_density(self) -> bool:
        return self.ppi is not None and math.isfinite(self.ppi) and self.ppi > 0

    @property
    def is_rotated(self) -> bool:
        return self.orientation == ORIENTATION_ROTATED_90

    @property
    def display_name(self) -> str | None:
        """Friendly name, falling back to the EDID monitor name."""
        return self.friendly_name or self.monitor_name or None

    @property
    def pixel_center(self) -> tuple[float, float]:
        """Center of the monitor in OS desktop pixels."""
        return (
            self.position_x + self.resolution_x / 2.0,
            self.position_y + self.resolution_y / 2.0,
        )


@dataclass(frozen=True, slots=True)
class CalibrationMeasurement:
    """Result of calibrating one *subject* monitor against a *bound* one.

    Parameters
    ----------
    monitor_id : int
        Subject monitor (the one that was calibrated).
    bound_to : int
        Reference monitor the subject was measured against.
    scale : float
        ``density(subject) / density(bound)``; must be > 0.
    gap : float
        Signed bezel gap in the bound monitor's pixel space.
    bind_horizontal : bool
        ``True`` when the pair sits side by side, ``False`` when stacked.
    align_offset_unbound, align_offset_bound : float
        Perpendicular-axis offset of the shared alignment line, each in its
        own monitor's pixels.
    relative_x, relative_y : float
        Raw relative offsets reported by the calibration overlay.  Carried
        into the calibration document only.
    """

    monitor_id: int
    bound_to: int
    scale: float
    gap: float = 0.0
    bind_horizontal: bool = True
    align_offset_unbound: float = 0.0
    align_offset_bound: float = 0.0
    relative_x: float = 0.0
    relative_y: float = 0.0

    @property
    def is_well_formed(self) -> bool:
        """Distinct endpoints and a finite, positive scale."""
        return (
            self.monitor_id != self.bound_to
            and math.isfinite(self.scale)
            and self.scale > 0
        )


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Edge:
    """One side of a measurement as seen from a node in the adjacency list."""

    measurement: CalibrationMeasurement
    neighbor: int
    # True when the owning node is the measurement's bound endpoint
    from_bound: bool


@dataclass(frozen=True)
class MeasurementGraph:
    """Immutable snapshot of monitors and the measurements between them.

    The adjacency list is built once at construction from well-formed
    measurements whose endpoints both exist.  Edges are ordered by
    neighbour id so that traversal order never depends on the order the
    measurements were supplied in.
    """

    monitors: tuple[Monitor, ...]
    measurements: tuple[CalibrationMeasurement, ...] = ()
    _by_id: Mapping[int, Monitor] = field(init=False, repr=False, compare=False)
    _adjacency: Mapping[int, tuple[Edge, ...]] = field(
        init=False, repr=False, compare=False
    )
    _usable: tuple[CalibrationMeasurement, ...] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        object.__setattr__(self, "monitors", tuple(self.monitors))
        object.__setattr__(self, "measurements", tuple(self.measurements))

        by_id: dict[int, Monitor] = {}
        for monitor in self.monitors:
            if monitor.id in by_id:
                logger.warning("Duplicate monitor id %d; keeping the first", monitor.id)
                continue
            by_id[monitor.id] = monitor

        adjacency: dict[int, list[Edge]] = {mid: [] for mid in by_id}
        usable: list[CalibrationMeasurement] = []
        for m in self.measurements:
            if not m.is_well_formed:
                logger.warning(
                    "Skipping malformed measurement %d -> %d (scale=%r)",
                    m.monitor_id, m.bound_to, m.scale,
                )
                continue
            if m.monitor_id not in by_id or m.bound_to not in by_id:
                logger.warning(
                    "Skipping measurement %d -> %d with unknown endpoint",
                    m.monitor_id, m.bound_to,
                )
                continue
            usable.append(m)
            adjacency[m.bound_to].append(Edge(m, m.monitor_id, from_bound=True))
            adjacency[m.monitor_id].append(Edge(m, m.bound_to, from_bound=False))

        object.__setattr__(self, "_by_id", MappingProxyType(by_id))
        object.__setattr__(
            self,
            "_adjacency",
            MappingProxyType({
                mid: tuple(sorted(edges, key=lambda e: (e.neighbor, not e.from_bound)))
                for mid, edges in adjacency.items()
            }),
        )
        object.__setattr__(self, "_usable", tuple(usable))

    # -- lookups ------------------------------------------------------------

    def monitor(self, monitor_id: int) -> Monitor:
        return self._by_id[monitor_id]

    def __contains__(self, monitor_id: object) -> bool:
        return monitor_id in self._by_id

    @property
    def monitor_ids(self) -> tuple[int, ...]:
        return tuple(self._by_id)

    @property
    def usable_measurements(self) -> tuple[CalibrationMeasurement, ...]:
        """Measurements that survived the well-formedness checks."""
        return self._usable

    def edges(self, monitor_id: int) -> tuple[Edge, ...]:
        return self._adjacency.get(monitor_id, ())

    def subject_ids(self) -> frozenset[int]:
        """Ids that appear as the subject of at least one usable measurement."""
        return frozenset(m.monitor_id for m in self._usable)

    def measurement_for(self, monitor_id: int) -> CalibrationMeasurement | None:
        """First usable measurement whose subject is *monitor_id*."""
        for m in self._usable:
            if m.monitor_id == monitor_id:
                return m
        return None

    # -- structure ----------------------------------------------------------

    def components(self) -> list[tuple[int, ...]]:
        """Connected components over usable measurements.

        Components are returned in the order of their first monitor in the
        snapshot, and each component lists its ids in snapshot order.
        """
        order = {mid: i for i, mid in enumerate(self._by_id)}
        seen: set[int] = set()
        result: list[tuple[int, ...]] = []
        for start in self._by_id:
            if start in seen:
                continue
            seen.add(start)
            members = [start]
            queue = deque([start])
            while queue:
                node = queue.popleft()
                for edge in self.edges(node):
                    if edge.neighbor not in seen:
                        seen.add(edge.neighbor)
                        members.append(edge.neighbor)
                        queue.append(edge.neighbor)
            result.append(tuple(sorted(members, key=order.__getitem__)))
        return result

    # -- construction helpers -----------------------------------------------

    @classmethod
    def from_records(
        cls,
        monitors: Iterable[dict[str, Any]],
        measurements: Iterable[dict[str, Any]] = (),
    ) -> "MeasurementGraph":
        """Build a graph from camelCase records as emitted by the collaborators."""
        return cls(
            monitors=tuple(monitor_from_record(r) for r in monitors),
            measurements=tuple(measurement_from_record(r) for r in measurements),
        )


def monitor_from_record(record: dict[str, Any]) -> Monitor:
    """Map a camelCase discovery record onto a ``Monitor``."""
    ppi = record.get("ppi")
    return Monitor(
        id=int(record["id"]),
        resolution_x=int(record["resolutionX"]),
        resolution_y=int(record["resolutionY"]),
        position_x=int(record.get("positionX", 0)),
        position_y=int(record.get("positionY", 0)),
        orientation=int(record.get("orientation", ORIENTATION_LANDSCAPE)),
        ppi=float(ppi) if ppi is not None else None,
        friendly_name=record.get("friendlyName") or None,
        monitor_name=record.get("monitorName") or None,
        device_name=record.get("deviceName", ""),
        adapter_name=record.get("adapterName", ""),
        is_primary=bool(record.get("isPrimary", False)),
        physical_width_mm=record.get("physicalWidthMm"),
        physical_height_mm=record.get("physicalHeightMm"),
        size_source=record.get("sizeSource", "none"),
    )


def measurement_from_record(record: dict[str, Any]) -> CalibrationMeasurement:
    """Map a camelCase calibration record onto a ``CalibrationMeasurement``."""
    return CalibrationMeasurement(
        monitor_id=int(record["monitorId"]),
        bound_to=int(record["boundTo"]),
        scale=float(record["scale"]),
        gap=float(record.get("gap", 0.0)),
        bind_horizontal=bool(record.get("bindHorizontal", True)),
        align_offset_unbound=float(record.get("alignOffsetUnbound", 0.0)),
        align_offset_bound=float(record.get("alignOffsetBound", 0.0)),
        relative_x=float(record.get("relativeX", 0.0)),
        relative_y=float(record.get("relativeY", 0.0)),
    )
