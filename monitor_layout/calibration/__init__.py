"""
Calibration module.

Plans the order of pairwise calibrations and the binding axis of each
pair.  The measurements themselves come from the interactive overlay.
"""

from monitor_layout.calibration.planning import (
    compute_calibration_order,
    determine_bind_horizontal,
    format_calibration_plan,
)

__all__ = [
    "compute_calibration_order",
    "determine_bind_horizontal",
    "format_calibration_plan",
]
