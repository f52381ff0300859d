"""Export formats: the shareable layout URL and the calibration document."""

from monitor_layout.export.calibration_doc import (
    build_calibration_document,
    export_calibration_json,
    write_calibration_document,
)
from monitor_layout.export.encoder import (
    RESOLUTION_ALIASES,
    aspect_ratio,
    build_layout_record,
    decode_layout_payload,
    encode_layout,
    format_resolution,
    parse_layout_url,
    serialize_layout,
)

__all__ = [
    "RESOLUTION_ALIASES",
    "aspect_ratio",
    "build_calibration_document",
    "build_layout_record",
    "decode_layout_payload",
    "encode_layout",
    "export_calibration_json",
    "format_resolution",
    "parse_layout_url",
    "serialize_layout",
    "write_calibration_document",
]
