"""Measurement graph data model and physical sizing helpers."""

from monitor_layout.graph.models import (
    CalibrationMeasurement,
    Edge,
    MeasurementGraph,
    Monitor,
    measurement_from_record,
    monitor_from_record,
)
from monitor_layout.graph.sizing import (
    complete_monitor,
    density_from_physical_size,
    guess_diagonal_from_names,
    physical_size_from_diagonal,
)

__all__ = [
    "CalibrationMeasurement",
    "Edge",
    "MeasurementGraph",
    "Monitor",
    "complete_monitor",
    "density_from_physical_size",
    "guess_diagonal_from_names",
    "measurement_from_record",
    "monitor_from_record",
    "physical_size_from_diagonal",
]
