"""Tests for the layout encoder.

Validates record fields (label, diagonal, aspect ratio, optional keys),
the URL shape, the raw-JSON fallback and decoding back to the record.
"""

from __future__ import annotations

import json
import math

import pytest

from monitor_layout.export import encoder
from monitor_layout.export.encoder import (
    aspect_ratio,
    build_layout_record,
    decode_layout_payload,
    encode_layout,
    format_resolution,
    monitor_record,
    parse_layout_url,
    serialize_layout,
)
from monitor_layout.graph.models import MeasurementGraph, Monitor
from monitor_layout.resolve.layout import PhysicalRect


@pytest.fixture()
def graph() -> MeasurementGraph:
    return MeasurementGraph(
        monitors=(
            Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0,
                    friendly_name="DELL U2723QE"),
            Monitor(id=1, resolution_x=1080, resolution_y=1920, orientation=1),
            Monitor(id=2, resolution_x=1280, resolution_y=1024),
        ),
    )


@pytest.fixture()
def normalized() -> dict[int, PhysicalRect]:
    return {
        0: PhysicalRect(60.2569, 41.3945, 2560 / 109, 1440 / 109),
        1: PhysicalRect(84.0, 30.5, 1080 / 90, 1920 / 90),
    }


# ---------------------------------------------------------------------------
# Field helpers
# ---------------------------------------------------------------------------


class TestFieldHelpers:
    def test_aspect_ratio_reduced(self) -> None:
        assert aspect_ratio(2560, 1440) == (16, 9)
        assert aspect_ratio(3440, 1440) == (43, 18)
        assert aspect_ratio(1280, 1024) == (5, 4)

    def test_aspect_ratio_zero_dimension(self) -> None:
        assert aspect_ratio(0, 1440) == (16, 9)
        assert aspect_ratio(2560, 0) == (16, 9)
        assert aspect_ratio(0, 0) == (16, 9)

    def test_known_resolution_alias(self) -> None:
        assert format_resolution(1920, 1080) == "FHD"
        assert format_resolution(3840, 2160) == "4K"

    def test_unknown_resolution_literal(self) -> None:
        assert format_resolution(1280, 1024) == "1280x1024"

    def test_custom_alias_table(self) -> None:
        assert format_resolution(1280, 1024, {"1280x1024": "SXGA"}) == "SXGA"

    def test_alias_table_is_constant(self) -> None:
        with pytest.raises(TypeError):
            encoder.RESOLUTION_ALIASES["1x1"] = "X"  # type: ignore[index]


class TestMonitorRecord:
    def test_landscape_record(self, graph, normalized) -> None:
        record = monitor_record(graph.monitor(0), normalized[0])
        diag = math.hypot(2560, 1440) / 109
        assert record["n"] == '27" QHD'
        assert record["d"] == pytest.approx(round(diag, 2))
        assert record["ar"] == [16, 9]
        assert (record["rx"], record["ry"]) == (2560, 1440)
        assert (record["x"], record["y"]) == (60.2569, 41.3945)
        assert record["dn"] == "DELL U2723QE"
        assert "rot" not in record

    def test_rotated_record_without_name(self, graph, normalized) -> None:
        record = monitor_record(graph.monitor(1), normalized[1])
        assert record["rot"] == 90
        assert "dn" not in record
        assert record["n"] == '24" 1080x1920'
        assert record["ar"] == [9, 16]

    def test_integral_values_written_as_ints(self, graph, normalized) -> None:
        record = monitor_record(graph.monitor(1), normalized[1])
        assert isinstance(record["x"], int) and record["x"] == 84
        assert isinstance(record["y"], float)

    def test_key_order(self, graph, normalized) -> None:
        record = monitor_record(graph.monitor(0), normalized[0])
        assert list(record) == ["n", "d", "ar", "rx", "ry", "x", "y", "dn"]


# ---------------------------------------------------------------------------
# Container and URL
# ---------------------------------------------------------------------------


class TestEncodeLayout:
    def test_record_in_snapshot_order_only_placed(self, graph, normalized) -> None:
        record = build_layout_record(graph, dict(reversed(list(normalized.items()))))
        assert record["v"] == 1
        assert [m["rx"] for m in record["m"]] == [2560, 1080]

    def test_compact_serialization(self, graph, normalized) -> None:
        text = serialize_layout(build_layout_record(graph, normalized))
        assert ", " not in text and '": ' not in text
        assert text.startswith('{"v":1,"m":[')

    def test_url_shape(self, graph, normalized) -> None:
        url = encode_layout(graph, normalized)
        assert url.startswith("https://spanright.com/#layout=~")

    def test_round_trip(self, graph, normalized) -> None:
        url = encode_layout(graph, normalized)
        assert parse_layout_url(url) == build_layout_record(graph, normalized)

    def test_astral_display_name_round_trip(self, normalized) -> None:
        graph = MeasurementGraph(
            monitors=(
                Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0,
                        friendly_name="Desk \U0001F5A5 main"),
                Monitor(id=1, resolution_x=1080, resolution_y=1920,
                        friendly_name="Côté"),
            ),
        )
        record = parse_layout_url(encode_layout(graph, normalized))
        assert [m["dn"] for m in record["m"]] == ["Desk \U0001F5A5 main", "Côté"]
        assert record == build_layout_record(graph, normalized)

    def test_serialization_is_ascii(self, normalized) -> None:
        graph = MeasurementGraph(
            monitors=(Monitor(id=0, resolution_x=2560, resolution_y=1440,
                              friendly_name="Desk \U0001F5A5"),),
        )
        text = serialize_layout(build_layout_record(graph, {0: normalized[0]}))
        assert text.isascii()
        assert "\\ud83d\\udda5" in text
        assert json.loads(text)["m"][0]["dn"] == "Desk \U0001F5A5"

    def test_deterministic(self, graph, normalized) -> None:
        assert encode_layout(graph, normalized) == encode_layout(graph, normalized)

    def test_empty_layout_has_no_url(self, graph) -> None:
        assert encode_layout(graph, {}) is None
        assert build_layout_record(graph, {}) is None

    def test_uncompressed_when_disabled(self, graph, normalized) -> None:
        url = encode_layout(graph, normalized, compress=False)
        _, payload = url.split("#layout=", 1)
        assert json.loads(payload) == build_layout_record(graph, normalized)
        assert parse_layout_url(url) == build_layout_record(graph, normalized)

    def test_fallback_when_compression_yields_nothing(
        self, graph, normalized, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        class _EmptyCompressor:
            def compressToEncodedURIComponent(self, text: str) -> str:
                return ""

        monkeypatch.setattr(encoder, "LZString", _EmptyCompressor)
        url = encode_layout(graph, normalized)
        assert url.startswith("https://spanright.com/#layout={")
        assert url.endswith(serialize_layout(build_layout_record(graph, normalized)))

    def test_custom_base_url_and_key(self, graph, normalized) -> None:
        url = encode_layout(
            graph, normalized, base_url="https://example.org/app#old", fragment_key="l"
        )
        assert url.startswith("https://example.org/app#l=~")
        assert parse_layout_url(url, fragment_key="l") == build_layout_record(graph, normalized)


class TestDecode:
    def test_raw_payload(self) -> None:
        assert decode_layout_payload('{"v":1,"m":[]}') == {"v": 1, "m": []}

    def test_bad_compressed_payload(self) -> None:
        with pytest.raises(ValueError):
            decode_layout_payload("~")

    def test_url_without_fragment(self) -> None:
        with pytest.raises(ValueError):
            parse_layout_url("https://spanright.com/")
