"""End-to-end tests: snapshot in, layout URL out.

Runs the documented scenarios through ``run_pipeline`` and checks the
pipeline-level contracts (idempotence, centering, "no layout" results).
"""

from __future__ import annotations

import dataclasses

import pytest

from monitor_layout.configs.loader import EngineConfig
from monitor_layout.export.encoder import parse_layout_url
from monitor_layout.graph.models import CalibrationMeasurement, MeasurementGraph, Monitor
from monitor_layout.pipeline import run_pipeline
from monitor_layout.resolve.normalize import bounding_box


@pytest.fixture()
def desk() -> MeasurementGraph:
    """Root QHD in the middle, FHD on the right, a portrait panel on the left."""
    return MeasurementGraph(
        monitors=(
            Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0,
                    is_primary=True, friendly_name="Center"),
            Monitor(id=1, resolution_x=1920, resolution_y=1080, position_x=2560),
            Monitor(id=2, resolution_x=1080, resolution_y=1920, position_x=-1080,
                    orientation=1),
        ),
        measurements=(
            CalibrationMeasurement(monitor_id=1, bound_to=0, scale=0.75, gap=5,
                                   bind_horizontal=True, align_offset_bound=720,
                                   align_offset_unbound=540),
            CalibrationMeasurement(monitor_id=2, bound_to=0, scale=0.85, gap=-12,
                                   bind_horizontal=True),
        ),
    )


class TestScenarios:
    def test_reference_pair(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0),
                Monitor(id=1, resolution_x=1920, resolution_y=1080, position_x=2560),
            ),
            measurements=(
                CalibrationMeasurement(monitor_id=1, bound_to=0, scale=0.75, gap=5,
                                       bind_horizontal=True),
            ),
        )
        result = run_pipeline(graph)
        assert result.densities[1] == pytest.approx(81.75)
        assert result.positions[1].x == pytest.approx(2560 / 109 + 5 / 109)
        assert result.positions[1].y == pytest.approx(0.0)
        assert result.url is not None

    def test_chain_in_reverse_order(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                Monitor(id=0, resolution_x=1920, resolution_y=1080, ppi=96.0),
                Monitor(id=1, resolution_x=1920, resolution_y=1080, position_x=1920),
                Monitor(id=2, resolution_x=1920, resolution_y=1080, position_x=3840),
            ),
            measurements=(
                CalibrationMeasurement(monitor_id=2, bound_to=1, scale=1.0),
                CalibrationMeasurement(monitor_id=1, bound_to=0, scale=1.0),
            ),
        )
        result = run_pipeline(graph)
        assert set(result.normalized) == {0, 1, 2}
        assert len(parse_layout_url(result.url)["m"]) == 3

    def test_unmeasured_monitor_absent(self, desk: MeasurementGraph) -> None:
        graph = MeasurementGraph(
            monitors=desk.monitors + (Monitor(id=9, resolution_x=1280, resolution_y=1024),),
            measurements=desk.measurements,
        )
        result = run_pipeline(graph)
        assert 9 not in result.densities
        assert 9 not in result.normalized
        record = parse_layout_url(result.url)
        assert [m["rx"] for m in record["m"]] == [2560, 1920, 1080]

    def test_single_monitor_centered(self) -> None:
        graph = MeasurementGraph(
            monitors=(Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0),),
        )
        result = run_pipeline(graph)
        rect = result.normalized[0]
        assert rect.x + rect.width / 2 == pytest.approx(72.0, abs=1e-4)
        assert rect.y + rect.height / 2 == pytest.approx(48.0, abs=1e-4)
        (entry,) = parse_layout_url(result.url)["m"]
        assert entry["n"] == '27" QHD'
        assert entry["ar"] == [16, 9]

    def test_zero_dimension_aspect_fallback(self) -> None:
        graph = MeasurementGraph(
            monitors=(Monitor(id=0, resolution_x=1920, resolution_y=0, ppi=96.0),),
        )
        (entry,) = parse_layout_url(run_pipeline(graph).url)["m"]
        assert entry["ar"] == [16, 9]


class TestContracts:
    def test_idempotent(self, desk: MeasurementGraph) -> None:
        first = run_pipeline(desk)
        second = run_pipeline(desk)
        assert first.url == second.url
        assert first.fingerprint == second.fingerprint

    def test_centered_on_canvas(self, desk: MeasurementGraph) -> None:
        min_x, min_y, max_x, max_y = bounding_box(run_pipeline(desk).normalized)
        assert (min_x + max_x) / 2 == pytest.approx(72.0, abs=1e-4)
        assert (min_y + max_y) / 2 == pytest.approx(48.0, abs=1e-4)

    def test_portrait_left_and_rotated(self, desk: MeasurementGraph) -> None:
        result = run_pipeline(desk)
        assert result.normalized[2].x < result.normalized[0].x
        entries = parse_layout_url(result.url)["m"]
        assert entries[2]["rot"] == 90
        assert entries[0]["dn"] == "Center"

    def test_no_density_no_layout(self) -> None:
        graph = MeasurementGraph(
            monitors=(Monitor(id=0, resolution_x=1920, resolution_y=1080),),
        )
        result = run_pipeline(graph)
        assert result.url is None
        assert result.fingerprint is None
        assert not result.has_layout
        assert dict(result.densities) == {}

    def test_empty_snapshot(self) -> None:
        result = run_pipeline(MeasurementGraph(monitors=()))
        assert result.url is None
        assert dict(result.normalized) == {}

    def test_only_primary_component_encoded(self, desk: MeasurementGraph) -> None:
        graph = MeasurementGraph(
            monitors=desk.monitors + (
                Monitor(id=5, resolution_x=1920, resolution_y=1080, ppi=92.0),
            ),
            measurements=desk.measurements,
        )
        result = run_pipeline(graph)
        assert set(result.positions) == {0, 1, 2, 5}
        assert set(result.normalized) == {0, 1, 2}

    def test_config_canvas_and_uncompressed(self, desk: MeasurementGraph) -> None:
        default = EngineConfig.default()
        config = dataclasses.replace(
            default,
            canvas=dataclasses.replace(default.canvas, width_in=100.0, height_in=60.0),
            export=dataclasses.replace(default.export, compress=False),
        )
        result = run_pipeline(desk, config)
        assert "#layout={" in result.url
        min_x, min_y, max_x, max_y = bounding_box(result.normalized)
        assert (min_x + max_x) / 2 == pytest.approx(50.0, abs=1e-4)
        assert (min_y + max_y) / 2 == pytest.approx(30.0, abs=1e-4)

    def test_derive_missing_density(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                Monitor(id=0, resolution_x=2560, resolution_y=1440,
                        physical_width_mm=597, physical_height_mm=336),
            ),
        )
        assert run_pipeline(graph).url is None
        config = dataclasses.replace(EngineConfig.default(), derive_missing_density=True)
        result = run_pipeline(graph, config)
        assert result.densities[0] == pytest.approx(108.8, abs=0.2)
        assert result.url is not None
