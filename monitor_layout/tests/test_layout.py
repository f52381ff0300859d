"""Tests for the layout resolver.

Covers placement on each side of the reference monitor, the alignment
offset between two differently-dense panels, root selection per
component, and independence from measurement order.
"""

from __future__ import annotations

import pytest

from monitor_layout.graph.models import CalibrationMeasurement, MeasurementGraph, Monitor
from monitor_layout.resolve.density import resolve_densities
from monitor_layout.resolve.layout import PhysicalRect, find_roots, resolve_positions


def _monitor(mid: int, ppi: float | None = None, **kw) -> Monitor:
    kw.setdefault("resolution_x", 2000)
    kw.setdefault("resolution_y", 1000)
    return Monitor(id=mid, ppi=ppi, **kw)


def _measure(subject: int, bound: int, scale: float = 1.0, **kw) -> CalibrationMeasurement:
    return CalibrationMeasurement(monitor_id=subject, bound_to=bound, scale=scale, **kw)


def _resolve(graph: MeasurementGraph):
    return resolve_positions(graph, resolve_densities(graph))


# ---------------------------------------------------------------------------
# Reference scenario
# ---------------------------------------------------------------------------


class TestReferencePair:
    @pytest.fixture()
    def graph(self) -> MeasurementGraph:
        return MeasurementGraph(
            monitors=(
                Monitor(id=0, resolution_x=2560, resolution_y=1440, ppi=109.0),
                Monitor(id=1, resolution_x=1920, resolution_y=1080, position_x=2560),
            ),
            measurements=(
                _measure(1, 0, 0.75, gap=5, bind_horizontal=True),
            ),
        )

    def test_density_of_subject(self, graph: MeasurementGraph) -> None:
        assert resolve_densities(graph)[1] == pytest.approx(81.75)

    def test_subject_right_of_root(self, graph: MeasurementGraph) -> None:
        rects = _resolve(graph).rects
        assert rects[0] == PhysicalRect(0.0, 0.0, 2560 / 109, 1440 / 109)
        assert rects[1].x == pytest.approx(2560 / 109 + 5 / 109)
        assert rects[1].y == pytest.approx(0.0)
        assert rects[1].width == pytest.approx(1920 / 81.75)
        assert rects[1].height == pytest.approx(1080 / 81.75)

    def test_negative_gap_uses_magnitude(self, graph: MeasurementGraph) -> None:
        flipped = MeasurementGraph(
            graph.monitors, (_measure(1, 0, 0.75, gap=-5, bind_horizontal=True),)
        )
        assert _resolve(flipped).rects[1].x == pytest.approx(2565 / 109)


# ---------------------------------------------------------------------------
# Direction and alignment
# ---------------------------------------------------------------------------


class TestPlacementDirection:
    def test_left_of_bound(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0, position_x=2000), _monitor(1, position_x=0)),
            measurements=(_measure(1, 0, gap=50, bind_horizontal=True),),
        )
        rect = _resolve(graph).rects[1]
        assert rect.x == pytest.approx(-20.0 - 0.5)
        assert rect.y == pytest.approx(0.0)

    def test_below_bound(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1, position_y=1000)),
            measurements=(_measure(1, 0, gap=100, bind_horizontal=False),),
        )
        rect = _resolve(graph).rects[1]
        assert rect.y == pytest.approx(10.0 + 1.0)
        assert rect.x == pytest.approx(0.0)

    def test_above_bound(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1, position_y=-1000)),
            measurements=(_measure(1, 0, scale=2.0, gap=0, bind_horizontal=False),),
        )
        rect = _resolve(graph).rects[1]
        # Subject is 200 ppi: 2000x1000 px -> 10x5 in
        assert rect.height == pytest.approx(5.0)
        assert rect.y == pytest.approx(-5.0)

    def test_alignment_uses_each_monitors_density(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1, position_x=2000)),
            measurements=(
                _measure(1, 0, scale=2.0, bind_horizontal=True,
                         align_offset_bound=150, align_offset_unbound=100),
            ),
        )
        rect = _resolve(graph).rects[1]
        # 150 px / 100 ppi - 100 px / 200 ppi
        assert rect.y == pytest.approx(1.0)

    def test_vertical_alignment_shifts_x(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1, position_y=1000)),
            measurements=(
                _measure(1, 0, bind_horizontal=False,
                         align_offset_bound=0, align_offset_unbound=300),
            ),
        )
        assert _resolve(graph).rects[1].x == pytest.approx(-3.0)


# ---------------------------------------------------------------------------
# Ordering and roots
# ---------------------------------------------------------------------------


class TestFixedPoint:
    def test_chain_listed_before_its_reference(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                _monitor(0, 100.0),
                _monitor(1, position_x=2000),
                _monitor(2, position_x=4000),
            ),
            measurements=(
                _measure(2, 1, bind_horizontal=True),
                _measure(1, 0, bind_horizontal=True),
            ),
        )
        rects = _resolve(graph).rects
        assert set(rects) == {0, 1, 2}
        assert rects[1].x == pytest.approx(20.0)
        assert rects[2].x == pytest.approx(40.0)

    def test_same_layout_for_any_order(self) -> None:
        monitors = (
            _monitor(0, 100.0),
            _monitor(1, position_x=2000),
            _monitor(2, position_y=1000),
            _monitor(3, position_x=2000, position_y=1000),
        )
        measurements = [
            _measure(1, 0, gap=10, bind_horizontal=True),
            _measure(2, 0, scale=1.1, gap=20, bind_horizontal=False),
            _measure(3, 1, scale=0.9, gap=5, bind_horizontal=False),
        ]
        forward = _resolve(MeasurementGraph(monitors, tuple(measurements))).rects
        backward = _resolve(MeasurementGraph(monitors, tuple(reversed(measurements)))).rects
        assert dict(forward) == dict(backward)


class TestRoots:
    def test_single_monitor_is_its_own_root(self) -> None:
        graph = MeasurementGraph(monitors=(_monitor(0, 100.0),))
        resolution = _resolve(graph)
        assert resolution.rects[0] == PhysicalRect(0.0, 0.0, 20.0, 10.0)
        assert resolution.primary().root == 0

    def test_component_without_root_omitted(self) -> None:
        # Both monitors are subjects: no anchor
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1)),
            measurements=(_measure(1, 0), _measure(0, 1)),
        )
        resolution = _resolve(graph)
        assert not resolution
        assert dict(resolution.rects) == {}

    def test_component_with_two_roots_omitted(self) -> None:
        graph = MeasurementGraph(
            monitors=(_monitor(0, 100.0), _monitor(1, 120.0), _monitor(2)),
            measurements=(_measure(2, 0), _measure(2, 1)),
        )
        assert find_roots(graph, resolve_densities(graph), (0, 1, 2)) == [0, 1]
        assert not _resolve(graph)

    def test_other_components_still_resolve(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                _monitor(0, 100.0), _monitor(1, 100.0), _monitor(2),
                _monitor(3, 90.0), _monitor(4, position_x=2000),
            ),
            measurements=(_measure(2, 0), _measure(2, 1), _measure(4, 3)),
        )
        resolution = _resolve(graph)
        assert set(resolution.rects) == {3, 4}
        assert resolution.primary().root == 3

    def test_unseeded_monitor_absent(self) -> None:
        graph = MeasurementGraph(monitors=(_monitor(0, 100.0), _monitor(7)))
        assert set(_resolve(graph).rects) == {0}

    def test_primary_is_largest_component(self) -> None:
        graph = MeasurementGraph(
            monitors=(
                _monitor(0, 100.0),
                _monitor(1, 100.0), _monitor(2, position_x=2000),
            ),
            measurements=(_measure(2, 1),),
        )
        resolution = _resolve(graph)
        assert len(resolution.components) == 2
        assert resolution.primary().root == 1
