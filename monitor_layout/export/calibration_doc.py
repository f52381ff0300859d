"""Calibration document -- a self-contained JSON record of one calibration.

Unlike the layout URL, this document keeps the raw measurement values
(scale, relative offsets, gap, reference monitor) for every monitor so a
calibration can be inspected or re-resolved later.  Monitors that were
never calibrated get the identity scale and no reference.
"""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from monitor_layout.graph.models import MeasurementGraph
from monitor_layout.utils.fs import atomic_write_text

DOCUMENT_VERSION = 1


def format_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 UTC timestamp with second precision and a ``Z`` suffix."""
    moment = moment or datetime.now(timezone.utc)
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def build_calibration_document(
    graph: MeasurementGraph,
    calibrated_at: datetime | None = None,
) -> dict[str, Any]:
    """Build the calibration document for every monitor in *graph*.

    Parameters
    ----------
    graph : MeasurementGraph
        Snapshot that was calibrated.
    calibrated_at : datetime | None
        Timestamp to record; ``None`` uses the current time.

    Returns
    -------
    dict
        ``{"version", "calibratedAt", "monitors": [...]}``
    """
    monitors = []
    for mid in graph.monitor_ids:
        m = graph.monitor(mid)
        cal = graph.measurement_for(mid)

        if m.physical_width_mm is not None and m.physical_height_mm is not None:
            physical_size = [m.physical_width_mm, m.physical_height_mm]
        else:
            physical_size = None

        monitors.append({
            "deviceName": m.device_name,
            "friendlyName": m.friendly_name or m.monitor_name or "",
            "resolution": [m.resolution_x, m.resolution_y],
            "physicalSizeMm": physical_size,
            "physicalSizeSource": m.size_source if physical_size else "none",
            "isPrimary": m.is_primary,
            "virtualPosition": [m.position_x, m.position_y],
            "scale": cal.scale if cal else 1.0,
            "relativeX": cal.relative_x if cal else 0.0,
            "relativeY": cal.relative_y if cal else 0.0,
            "gap": cal.gap if cal else 0,
            "boundTo": cal.bound_to if cal else None,
        })

    return {
        "version": DOCUMENT_VERSION,
        "calibratedAt": format_timestamp(calibrated_at),
        "monitors": monitors,
    }


def export_calibration_json(
    graph: MeasurementGraph,
    calibrated_at: datetime | None = None,
) -> str:
    """Pretty-printed JSON text of :func:`build_calibration_document`."""
    return json.dumps(build_calibration_document(graph, calibrated_at), indent=2)


def write_calibration_document(
    graph: MeasurementGraph,
    path: str | Path,
    calibrated_at: datetime | None = None,
) -> Path:
    """Write the calibration document atomically and return its path."""
    path = Path(path)
    atomic_write_text(path, export_calibration_json(graph, calibrated_at) + "\n")
    return path
