"""Engine configuration loading and validation."""

from monitor_layout.configs.loader import (
    CanvasConfig,
    ConfigError,
    EngineConfig,
    ExportConfig,
    LoggingConfig,
    RoundingConfig,
    load_config,
)

__all__ = [
    "CanvasConfig",
    "ConfigError",
    "EngineConfig",
    "ExportConfig",
    "LoggingConfig",
    "RoundingConfig",
    "load_config",
]
