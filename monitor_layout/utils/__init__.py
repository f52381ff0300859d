"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Snapshot validation (validators)
    - Atomic I/O and YAML loading (fs)
    - Hashing for layout provenance (hashing)
    - Unified logging (logging_config)

Only ``validators`` imports from the engine (to build the graph it
validates); everything else is engine-agnostic.

Convenience imports:
    from monitor_layout.utils import fs, validators
    from monitor_layout.utils.logging_config import setup_logging, get_logger
"""

from . import fs
from . import hashing
from . import logging_config

from .logging_config import get_logger, push_context, setup_logging, teardown_logging

__all__ = [
    'fs',
    'hashing',
    'logging_config',
    'setup_logging',
    'get_logger',
    'push_context',
    'teardown_logging',
]
