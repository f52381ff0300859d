"""Logging setup shared by the command line and embedding applications.

Library modules only ever call ``logging.getLogger(__name__)``.  An entry
point calls :func:`setup_logging` once to attach:

    - a console handler on stderr (human lines, or JSON with ``json=True``)
    - an optional file handler that always writes JSON lines

Context fields (``app``, ``snapshot``) are held in a ``ContextVar`` and
appended to every record formatted afterwards:

    Human: 2026-10-17T13:45:12.345Z | INFO     | app=monitor-layout | Resolved 3 densities
    JSON:  {"t": "2026-10-17T13:45:12.345000+00:00", "lvl": "INFO", "name": "...", "msg": "...", "app": "monitor-layout"}

Calling :func:`setup_logging` again swaps the handlers it installed the
previous time and leaves handlers owned by anyone else alone.
"""

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"

_context: contextvars.ContextVar[Dict[str, Any]] = contextvars.ContextVar(
    "monitor_layout_log_context", default={}
)

# Handlers attached by the last setup_logging() call
_installed: List[logging.Handler] = []


class ContextFormatter(logging.Formatter):
    """Render records as human lines or JSON objects, plus context fields.

    Parameters
    ----------
    mode : str
        ``"human"`` or ``"json"``.
    use_color : bool
        Color the level name.  Ignored unless stderr is a terminal.
    utc : bool
        UTC timestamps (default) or local time.
    """

    def __init__(self, mode: str = "human", use_color: bool = True, utc: bool = True):
        super().__init__()
        if mode not in ("human", "json"):
            raise ValueError(f"Unknown log format mode: {mode!r}")
        self.mode = mode
        self.use_color = use_color and sys.stderr.isatty()
        self.utc = utc

    def _timestamp(self, record: logging.LogRecord) -> datetime:
        if self.utc:
            return datetime.fromtimestamp(record.created, tz=timezone.utc)
        return datetime.fromtimestamp(record.created).astimezone()

    def format(self, record: logging.LogRecord) -> str:
        fields = _context.get()
        ts = self._timestamp(record)
        if self.mode == "json":
            payload: Dict[str, Any] = {
                "t": ts.isoformat(),
                "lvl": record.levelname,
                "name": record.name,
                "msg": record.getMessage(),
                **fields,
            }
            if record.exc_info:
                payload["exc"] = self.formatException(record.exc_info)
            return json.dumps(payload, default=str)

        level = f"{record.levelname:<8}"
        if self.use_color and record.levelname in _LEVEL_COLORS:
            level = _LEVEL_COLORS[record.levelname] + level + _RESET

        columns = [ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z", level]
        if fields:
            columns.append(" ".join(f"{k}={v}" for k, v in fields.items()))
        columns.append(record.getMessage())
        text = " | ".join(columns)

        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def _resolve_level(level: Union[str, int]) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def teardown_logging() -> None:
    """Detach and close the handlers installed by :func:`setup_logging`."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def setup_logging(
    log_level: Union[str, int] = "INFO",
    log_file: Optional[Union[str, Path]] = None,
    *,
    json: bool = False,
    color: bool = True,
    to_stderr: bool = True,
    utc: bool = True,
    capture_warnings: bool = True,
    context: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """Attach console and file handlers to the root logger.

    Parameters
    ----------
    log_level : str | int
        Root level, e.g. ``"INFO"``.
    log_file : str | Path, optional
        JSON-lines log file; parent directories are created.
    json : bool
        JSON lines on the console too.
    color : bool
        Colored level names on a terminal.
    to_stderr : bool
        Attach the console handler.
    utc : bool
        UTC timestamps.
    capture_warnings : bool
        Route ``warnings.warn`` through logging.
    context : dict, optional
        Fields pushed with :func:`push_context`.

    Returns
    -------
    dict
        ``{"handlers": [...]}``, the handlers now attached.
    """
    teardown_logging()

    root = logging.getLogger()
    root.setLevel(_resolve_level(log_level))

    if to_stderr:
        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(ContextFormatter("json" if json else "human", color, utc))
        _installed.append(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, encoding="utf-8")
        file_handler.setFormatter(ContextFormatter("json", use_color=False, utc=utc))
        _installed.append(file_handler)

    for handler in _installed:
        root.addHandler(handler)

    if context:
        push_context(**context)
    logging.captureWarnings(capture_warnings)

    return {"handlers": list(_installed)}


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def push_context(**fields: Any) -> None:
    """Add *fields* to every record formatted from now on."""
    _context.set({**_context.get(), **fields})


def pop_context(keys: Optional[Iterable[str]] = None) -> None:
    """Drop the named context fields, or all of them when *keys* is None."""
    if keys is None:
        _context.set({})
        return
    drop = set(keys)
    _context.set({k: v for k, v in _context.get().items() if k not in drop})


def current_context() -> Dict[str, Any]:
    return dict(_context.get())
