"""
Monitor Layout Package.

Resolves pairwise monitor calibration measurements into absolute pixel
densities, a physical layout in inches, and a compact shareable layout URL.

Subpackages:
    graph: Monitor / measurement data model and physical sizing helpers
    resolve: Density propagation, physical placement, canvas normalization
    export: Layout URL encoder and calibration document export
    calibration: Calibration order planning
    configs: Engine configuration loading and validation
    utils: Logging, atomic I/O, hashing, snapshot validation

Usage::

    from monitor_layout.pipeline import run_pipeline
    from monitor_layout.utils.validators import load_snapshot

    result = run_pipeline(load_snapshot("desk.yaml"))
    print(result.url)
"""

__version__ = "0.1.0"

__all__ = ["graph", "resolve", "export", "calibration", "configs", "utils", "pipeline"]
