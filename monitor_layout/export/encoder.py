"""Layout encoder -- turn a normalized layout into a shareable URL.

Record format (schema version 1)::

    {"v": 1, "m": [{"n": "27\\" QHD", "d": 27.0, "ar": [16, 9],
                    "rx": 2560, "ry": 1440, "x": 58.2559, "y": 40.2734,
                    "rot": 90, "dn": "DELL U2723QE"}]}

``rot`` is present only for monitors rotated 90 degrees and ``dn`` only
when a display name is known.  The record is serialized as compact JSON,
compressed with lz-string's URI-safe alphabet and prefixed with ``~``.
When compression yields nothing, the raw JSON is embedded instead; the
consumer tells the two apart by the prefix.

Numbers are written the way ``JSON.stringify`` writes them (``72`` rather
than ``72.0``) so the same layout encodes to the same URL on both sides.
"""

from __future__ import annotations

import json
import logging
import math
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urldefrag

from lzstring import LZString

from monitor_layout.graph.models import MeasurementGraph, Monitor
from monitor_layout.resolve.layout import PhysicalRect
from monitor_layout.resolve.normalize import round_half_up

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1
BASE_URL = "https://spanright.com/"
FRAGMENT_KEY = "layout"
COMPRESSED_PREFIX = "~"
DEFAULT_ASPECT_RATIO = (16, 9)
DIAGONAL_DECIMALS = 2

RESOLUTION_ALIASES: Mapping[str, str] = MappingProxyType({
    "1920x1080": "FHD",
    "1920x1200": "WUXGA",
    "2560x1080": "UWFHD",
    "2560x1440": "QHD",
    "3440x1440": "UWQHD",
    "3840x2160": "4K",
    "3840x1600": "UW4K",
})


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


def format_resolution(
    resolution_x: int,
    resolution_y: int,
    aliases: Mapping[str, str] = RESOLUTION_ALIASES,
) -> str:
    """Short name for well-known resolutions, ``"WxH"`` otherwise."""
    key = f"{resolution_x}x{resolution_y}"
    return aliases.get(key, key)


def aspect_ratio(
    resolution_x: int,
    resolution_y: int,
    default: tuple[int, int] = DEFAULT_ASPECT_RATIO,
) -> tuple[int, int]:
    """Pixel aspect ratio in lowest terms; *default* for a zero dimension."""
    if resolution_x <= 0 or resolution_y <= 0:
        return default
    g = math.gcd(resolution_x, resolution_y)
    if g == 0:
        return default
    return resolution_x // g, resolution_y // g


def _js_number(value: float) -> int | float:
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def monitor_record(
    monitor: Monitor,
    rect: PhysicalRect,
    *,
    aliases: Mapping[str, str] = RESOLUTION_ALIASES,
    default_aspect: tuple[int, int] = DEFAULT_ASPECT_RATIO,
    diagonal_decimals: int = DIAGONAL_DECIMALS,
) -> dict[str, Any]:
    """Build the record for one placed monitor."""
    diagonal = math.hypot(rect.width, rect.height)
    label = format_resolution(monitor.resolution_x, monitor.resolution_y, aliases)
    record: dict[str, Any] = {
        "n": f'{int(round_half_up(diagonal, 0))}" {label}',
        "d": _js_number(round_half_up(diagonal, diagonal_decimals)),
        "ar": list(aspect_ratio(monitor.resolution_x, monitor.resolution_y, default_aspect)),
        "rx": monitor.resolution_x,
        "ry": monitor.resolution_y,
        "x": _js_number(rect.x),
        "y": _js_number(rect.y),
    }
    if monitor.is_rotated:
        record["rot"] = 90
    if monitor.display_name:
        record["dn"] = monitor.display_name
    return record


def build_layout_record(
    graph: MeasurementGraph,
    normalized: Mapping[int, PhysicalRect],
    **record_options: Any,
) -> dict[str, Any] | None:
    """Versioned container for every monitor in *normalized*.

    Monitors appear in snapshot order.  Returns ``None`` for an empty
    layout.
    """
    records = [
        monitor_record(graph.monitor(mid), normalized[mid], **record_options)
        for mid in graph.monitor_ids
        if mid in normalized
    ]
    if not records:
        return None
    return {"v": SCHEMA_VERSION, "m": records}


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def serialize_layout(record: Mapping[str, Any]) -> str:
    """Compact ASCII JSON, key order preserved.

    Non-ASCII text is written as ``\\uXXXX`` escapes, astral characters as
    surrogate pairs, so every payload character fits lz-string's 16-bit
    code units.
    """
    return json.dumps(record, separators=(",", ":"), ensure_ascii=True)


def compress_payload(
    text: str,
    *,
    compress: bool = True,
    prefix: str = COMPRESSED_PREFIX,
) -> str:
    """Compress *text* for a URL fragment, falling back to the raw text."""
    if not compress:
        return text
    compressed = LZString().compressToEncodedURIComponent(text)
    if not compressed:
        logger.warning("Layout compression produced no output; embedding raw JSON")
        return text
    return prefix + compressed


def decode_layout_payload(
    payload: str,
    *,
    prefix: str = COMPRESSED_PREFIX,
) -> dict[str, Any]:
    """Invert :func:`compress_payload` + :func:`serialize_layout`.

    Raises
    ------
    ValueError
        If a prefixed payload does not decompress.
    """
    if payload.startswith(prefix):
        text = LZString().decompressFromEncodedURIComponent(payload[len(prefix):])
        if not text:
            raise ValueError("Layout payload does not decompress")
    else:
        text = payload
    return json.loads(text)


def build_layout_url(
    payload: str,
    *,
    base_url: str = BASE_URL,
    fragment_key: str = FRAGMENT_KEY,
) -> str:
    base, _ = urldefrag(base_url)
    return f"{base}#{fragment_key}={payload}"


def parse_layout_url(
    url: str,
    *,
    fragment_key: str = FRAGMENT_KEY,
    prefix: str = COMPRESSED_PREFIX,
) -> dict[str, Any]:
    """Extract and decode the layout record from a layout URL."""
    _, fragment = urldefrag(url)
    key, sep, payload = fragment.partition("=")
    if not sep or key != fragment_key:
        raise ValueError(f"URL has no '{fragment_key}' fragment: {url}")
    return decode_layout_payload(payload, prefix=prefix)


def encode_layout(
    graph: MeasurementGraph,
    normalized: Mapping[int, PhysicalRect],
    *,
    base_url: str = BASE_URL,
    fragment_key: str = FRAGMENT_KEY,
    compress: bool = True,
    prefix: str = COMPRESSED_PREFIX,
    **record_options: Any,
) -> str | None:
    """Full encoder: record, serialize, compress, wrap in a URL.

    Returns ``None`` when *normalized* is empty.
    """
    record = build_layout_record(graph, normalized, **record_options)
    if record is None:
        return None
    payload = compress_payload(serialize_layout(record), compress=compress, prefix=prefix)
    return build_layout_url(payload, base_url=base_url, fragment_key=fragment_key)
