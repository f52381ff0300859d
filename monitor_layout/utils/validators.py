"""Snapshot schema validation and loading.

Provides centralized validation of the input snapshot file using pydantic:
    - Monitor records (discovery collaborator output)
    - Measurement records (calibration collaborator output)
    - Snapshot container (layout_snapshot.v1 schema)

Keys are accepted in the collaborators' camelCase (``resolutionX``) or in
snake_case (``resolution_x``).

Validation is structural: types, required fields and ranges that no
monitor can violate (positive resolutions).  Measurement semantics such
as a self edge or a non-positive scale are *not* rejected here; the
resolvers skip those edges so a single bad measurement never blocks the
rest of the layout.

Units:
    - Resolution, position, gap, offsets: pixels
    - Density: pixels per inch
    - Physical size: millimetres

Usage:
    from monitor_layout.utils import validators
    graph = validators.load_snapshot("desk.yaml")
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from monitor_layout.graph.models import CalibrationMeasurement, MeasurementGraph, Monitor
from monitor_layout.utils.fs import load_yaml

logger = logging.getLogger(__name__)

SNAPSHOT_SCHEMA = "layout_snapshot.v1"


class SnapshotError(Exception):
    """Raised when a snapshot file fails schema validation."""

    pass


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


# ============================================================================
# RECORDS
# ============================================================================

class MonitorV1(_CamelModel):
    """One discovered monitor."""
    id: int = Field(..., ge=0, description="Stable monitor id")
    resolution_x: int = Field(..., gt=0, description="Horizontal resolution (px)")
    resolution_y: int = Field(..., gt=0, description="Vertical resolution (px)")
    position_x: int = Field(0, description="OS desktop x (px)")
    position_y: int = Field(0, description="OS desktop y (px)")
    orientation: int = Field(0, ge=0, le=3, description="0 landscape, 1 rotated 90")
    ppi: Optional[float] = Field(None, description="Known density (px/in)")
    friendly_name: Optional[str] = None
    monitor_name: Optional[str] = None
    device_name: str = ""
    adapter_name: str = ""
    is_primary: bool = False
    physical_width_mm: Optional[int] = Field(None, ge=0)
    physical_height_mm: Optional[int] = Field(None, ge=0)
    size_source: Literal["edid", "guessed", "manual", "none"] = "none"

    @field_validator('ppi')
    @classmethod
    def drop_non_positive_ppi(cls, v: Optional[float]) -> Optional[float]:
        # Discovery reports 0 for "unknown"
        if v is not None and v <= 0:
            return None
        return v

    def to_monitor(self) -> Monitor:
        return Monitor(
            id=self.id,
            resolution_x=self.resolution_x,
            resolution_y=self.resolution_y,
            position_x=self.position_x,
            position_y=self.position_y,
            orientation=self.orientation,
            ppi=self.ppi,
            friendly_name=self.friendly_name or None,
            monitor_name=self.monitor_name or None,
            device_name=self.device_name,
            adapter_name=self.adapter_name,
            is_primary=self.is_primary,
            physical_width_mm=self.physical_width_mm,
            physical_height_mm=self.physical_height_mm,
            size_source=self.size_source,
        )


class MeasurementV1(_CamelModel):
    """One pairwise calibration measurement (subject -> bound)."""
    monitor_id: int = Field(..., description="Subject monitor id")
    bound_to: int = Field(..., description="Reference monitor id")
    scale: float = Field(..., description="density(subject) / density(bound)")
    gap: float = 0.0
    bind_horizontal: bool = True
    align_offset_unbound: float = 0.0
    align_offset_bound: float = 0.0
    relative_x: float = 0.0
    relative_y: float = 0.0

    def to_measurement(self) -> CalibrationMeasurement:
        return CalibrationMeasurement(
            monitor_id=self.monitor_id,
            bound_to=self.bound_to,
            scale=self.scale,
            gap=self.gap,
            bind_horizontal=self.bind_horizontal,
            align_offset_unbound=self.align_offset_unbound,
            align_offset_bound=self.align_offset_bound,
            relative_x=self.relative_x,
            relative_y=self.relative_y,
        )


# ============================================================================
# SNAPSHOT SCHEMA V1
# ============================================================================

class SnapshotV1(BaseModel):
    """Monitor + measurement snapshot (one resolution request)."""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    schema_version: str = Field(SNAPSHOT_SCHEMA, alias="schema", description="Schema version")
    monitors: List[MonitorV1] = Field(default_factory=list)
    measurements: List[MeasurementV1] = Field(default_factory=list)

    @field_validator('schema_version')
    @classmethod
    def validate_schema(cls, v: str) -> str:
        if v != SNAPSHOT_SCHEMA:
            raise ValueError(f"Expected schema '{SNAPSHOT_SCHEMA}', got '{v}'")
        return v

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'SnapshotV1':
        ids = [m.id for m in self.monitors]
        duplicates = sorted({i for i in ids if ids.count(i) > 1})
        if duplicates:
            raise ValueError(f"Duplicate monitor ids: {duplicates}")
        return self

    def to_graph(self) -> MeasurementGraph:
        return MeasurementGraph(
            monitors=tuple(m.to_monitor() for m in self.monitors),
            measurements=tuple(m.to_measurement() for m in self.measurements),
        )


# ============================================================================
# LOADERS
# ============================================================================

def validate_snapshot(data: Any) -> SnapshotV1:
    """Validate an already-parsed snapshot mapping.

    Raises
    ------
    SnapshotError
        With pydantic's field-level messages on failure.
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Snapshot must be a mapping, got {type(data).__name__}")
    try:
        return SnapshotV1.model_validate(data)
    except ValidationError as e:
        raise SnapshotError(f"Invalid snapshot:\n{e}") from e


def load_snapshot(path: Union[str, Path]) -> MeasurementGraph:
    """Load a YAML or JSON snapshot file into a ``MeasurementGraph``.

    Raises
    ------
    FileNotFoundError
        If the file doesn't exist
    SnapshotError
        If the content fails validation
    """
    path = Path(path)
    logger.info("Loading snapshot from %s", path)
    snapshot = validate_snapshot(load_yaml(path))
    graph = snapshot.to_graph()
    logger.info(
        "Snapshot has %d monitor(s) and %d measurement(s)",
        len(graph.monitors), len(graph.measurements),
    )
    return graph
