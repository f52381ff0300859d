"""End-to-end resolution: snapshot -> densities -> layout -> URL.

Each stage is a pure function; this module only wires them together with
the values from :class:`EngineConfig` and collects the intermediate
results, so a caller can show the resolved densities next to the URL.

"No layout" is an ordinary outcome: ``LayoutResult.url`` is ``None`` and
the mappings are empty or partial.  Nothing here raises for missing data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from monitor_layout.configs.loader import EngineConfig
from monitor_layout.export.encoder import build_layout_record, encode_layout
from monitor_layout.graph.models import MeasurementGraph
from monitor_layout.graph.sizing import complete_monitor
from monitor_layout.resolve.density import resolve_densities
from monitor_layout.resolve.layout import LayoutResolution, PhysicalRect, resolve_positions
from monitor_layout.resolve.normalize import normalize_layout
from monitor_layout.utils.hashing import hash_dict, short_fingerprint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutResult:
    """Everything one pipeline run produced.

    Attributes
    ----------
    densities : Mapping[int, float]
        Resolved ppi per monitor id.
    resolution : LayoutResolution
        Every placeable component, each in its own frame.
    normalized : Mapping[int, PhysicalRect]
        Primary component centered on the canvas.
    url : str | None
        Shareable layout URL, ``None`` when nothing could be placed.
    fingerprint : str | None
        SHA-256 of the encoded record.
    """

    densities: Mapping[int, float]
    resolution: LayoutResolution
    normalized: Mapping[int, PhysicalRect]
    url: str | None
    fingerprint: str | None

    @property
    def positions(self) -> Mapping[int, PhysicalRect]:
        return self.resolution.rects

    @property
    def has_layout(self) -> bool:
        return self.url is not None


def prepare_graph(graph: MeasurementGraph, config: EngineConfig) -> MeasurementGraph:
    """Fill in derivable densities when the config asks for it."""
    if not config.derive_missing_density:
        return graph
    return MeasurementGraph(
        monitors=tuple(complete_monitor(m) for m in graph.monitors),
        measurements=graph.measurements,
    )


def run_pipeline(
    graph: MeasurementGraph,
    config: EngineConfig | None = None,
) -> LayoutResult:
    """Resolve *graph* into densities, a physical layout and a layout URL.

    When several components each have their own root only the primary one
    (most monitors, earliest on ties) is normalized and encoded: separate
    components share no frame of reference and would overlap.
    """
    config = config or EngineConfig.default()
    graph = prepare_graph(graph, config)

    densities = resolve_densities(graph)
    resolution = resolve_positions(graph, densities)

    primary = resolution.primary()
    if primary is None:
        logger.info("No monitor could be placed; no layout produced")
        return LayoutResult(
            densities=densities,
            resolution=resolution,
            normalized=MappingProxyType({}),
            url=None,
            fingerprint=None,
        )

    dropped = [c.root for c in resolution.components if c is not primary]
    if dropped:
        logger.warning(
            "Layout uses the component rooted at monitor %d; dropped components rooted at %s",
            primary.root, dropped,
        )

    normalized = normalize_layout(
        primary.rects,
        canvas=config.canvas.size,
        decimals=config.rounding.position_decimals,
    )

    record_options = config.record_options()
    record = build_layout_record(graph, normalized, **record_options)
    url = encode_layout(
        graph,
        normalized,
        base_url=config.export.base_url,
        fragment_key=config.export.fragment_key,
        compress=config.export.compress,
        prefix=config.export.compressed_prefix,
        **record_options,
    )
    fingerprint = hash_dict(record) if record is not None else None
    logger.info(
        "Layout with %d monitor(s) encoded (fingerprint %s)",
        len(normalized), short_fingerprint(fingerprint) if fingerprint else "-",
    )

    return LayoutResult(
        densities=densities,
        resolution=resolution,
        normalized=normalized,
        url=url,
        fingerprint=fingerprint,
    )
