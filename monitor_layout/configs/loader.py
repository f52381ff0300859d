"""Configuration loader for the layout engine.

Loads and validates ``engine.yaml`` into typed, frozen dataclasses.  The
export canvas, rounding precision, URL shape and resolution aliases all
come from the config; the module constants in the resolvers and encoder
are only the defaults used when no config is passed.

Usage::

    from monitor_layout.configs.loader import load_config
    cfg = load_config()                      # default path
    cfg = load_config("/custom/engine.yaml") # explicit path
    cfg = EngineConfig.default()             # no disk access
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping
from urllib.parse import urlparse

from monitor_layout.export import encoder
from monitor_layout.resolve import normalize
from monitor_layout.utils.fs import load_yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "engine.yaml"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(Exception):
    """Raised when configuration validation fails."""

    pass


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CanvasConfig:
    """Export canvas size in inches."""

    width_in: float = normalize.CANVAS_WIDTH_IN
    height_in: float = normalize.CANVAS_HEIGHT_IN

    @property
    def size(self) -> tuple[float, float]:
        return (self.width_in, self.height_in)

    @property
    def center(self) -> tuple[float, float]:
        return (self.width_in / 2.0, self.height_in / 2.0)


@dataclass(frozen=True)
class RoundingConfig:
    """Decimal places kept in the exported layout."""

    position_decimals: int = normalize.POSITION_DECIMALS
    diagonal_decimals: int = encoder.DIAGONAL_DECIMALS


@dataclass(frozen=True)
class ExportConfig:
    """Layout URL settings."""

    base_url: str = encoder.BASE_URL
    fragment_key: str = encoder.FRAGMENT_KEY
    compress: bool = True
    compressed_prefix: str = encoder.COMPRESSED_PREFIX
    default_aspect_ratio: tuple[int, int] = encoder.DEFAULT_ASPECT_RATIO


@dataclass(frozen=True)
class LoggingConfig:
    """Defaults for ``setup_logging`` when run from the command line."""

    level: str = "INFO"
    json: bool = False
    log_file: str | None = None


@dataclass(frozen=True)
class EngineConfig:
    """Top-level engine configuration."""

    canvas: CanvasConfig = field(default_factory=CanvasConfig)
    rounding: RoundingConfig = field(default_factory=RoundingConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    resolution_aliases: Mapping[str, str] = field(
        default_factory=lambda: encoder.RESOLUTION_ALIASES
    )
    derive_missing_density: bool = False
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def default(cls) -> "EngineConfig":
        return cls()

    def record_options(self) -> dict[str, Any]:
        """Keyword arguments for the encoder's per-monitor records."""
        return {
            "aliases": self.resolution_aliases,
            "default_aspect": self.export.default_aspect_ratio,
            "diagonal_decimals": self.rounding.diagonal_decimals,
        }


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def _parse_aliases(raw: Any) -> Mapping[str, str]:
    if raw is None:
        return encoder.RESOLUTION_ALIASES
    if not isinstance(raw, dict):
        raise ConfigError(f"resolution_aliases must be a mapping, got {type(raw).__name__}")
    merged = dict(encoder.RESOLUTION_ALIASES)
    for key, name in raw.items():
        key = str(key)
        width, sep, height = key.partition("x")
        if not sep or not width.isdigit() or not height.isdigit():
            raise ConfigError(f"Resolution alias key must look like '1920x1080', got {key!r}")
        merged[key] = str(name)
    return MappingProxyType(merged)


def _parse_aspect(raw: Any) -> tuple[int, int]:
    if not isinstance(raw, (list, tuple)) or len(raw) != 2:
        raise ConfigError(f"default_aspect_ratio must be a pair, got {raw!r}")
    return int(raw[0]), int(raw[1])


def _validate_config(cfg: EngineConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    if cfg.canvas.width_in <= 0 or cfg.canvas.height_in <= 0:
        raise ConfigError(
            f"Canvas must be positive, got {cfg.canvas.width_in} x {cfg.canvas.height_in}"
        )

    if cfg.rounding.position_decimals < 0 or cfg.rounding.diagonal_decimals < 0:
        raise ConfigError("Rounding decimals must be >= 0")

    parsed = urlparse(cfg.export.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"base_url must be an http(s) URL, got {cfg.export.base_url!r}")
    if parsed.fragment:
        raise ConfigError("base_url must not carry a fragment")

    if not cfg.export.fragment_key:
        raise ConfigError("fragment_key must not be empty")

    prefix = cfg.export.compressed_prefix
    if not prefix or prefix.startswith("{"):
        # Raw JSON payloads start with '{'; the prefix has to be distinguishable
        raise ConfigError(f"compressed_prefix must be non-empty and not '{{', got {prefix!r}")

    a, b = cfg.export.default_aspect_ratio
    if a <= 0 or b <= 0:
        raise ConfigError(f"default_aspect_ratio terms must be positive, got {a}:{b}")

    if cfg.logging.level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise ConfigError(f"Unknown log level {cfg.logging.level!r}")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: str | Path | None = None) -> EngineConfig:
    """Load and validate engine configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``engine.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    EngineConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.info("Loading configuration from %s", path)

    data: dict[str, Any] = load_yaml(path)
    if data is None:
        raise ConfigError(f"Empty configuration file: {path}")

    try:
        # -- canvas ---------------------------------------------------------
        cv = data["canvas"]
        canvas = CanvasConfig(
            width_in=float(cv["width_in"]),
            height_in=float(cv["height_in"]),
        )

        # -- rounding -------------------------------------------------------
        rd = data.get("rounding", {})
        rounding = RoundingConfig(
            position_decimals=int(rd.get("position_decimals", normalize.POSITION_DECIMALS)),
            diagonal_decimals=int(rd.get("diagonal_decimals", encoder.DIAGONAL_DECIMALS)),
        )

        # -- export ---------------------------------------------------------
        ex = data["export"]
        export = ExportConfig(
            base_url=str(ex["base_url"]),
            fragment_key=str(ex.get("fragment_key", encoder.FRAGMENT_KEY)),
            compress=bool(ex.get("compress", True)),
            compressed_prefix=str(ex.get("compressed_prefix", encoder.COMPRESSED_PREFIX)),
            default_aspect_ratio=_parse_aspect(
                ex.get("default_aspect_ratio", encoder.DEFAULT_ASPECT_RATIO)
            ),
        )

        # -- logging --------------------------------------------------------
        lg = data.get("logging") or {}
        log_file = lg.get("log_file")
        logging_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")),
            json=bool(lg.get("json", False)),
            log_file=str(log_file) if log_file else None,
        )

        config = EngineConfig(
            canvas=canvas,
            rounding=rounding,
            export=export,
            resolution_aliases=_parse_aliases(data.get("resolution_aliases")),
            derive_missing_density=bool(data.get("derive_missing_density", False)),
            logging=logging_cfg,
        )

        _validate_config(config)
        logger.info("Configuration loaded successfully")
        return config

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc
