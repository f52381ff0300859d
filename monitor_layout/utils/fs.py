"""File helpers: atomic writes and YAML/JSON document loading.

Calibration documents and layout URLs are replaced in one rename, so a
consumer polling the output directory sees either the previous file or
the new one.  Snapshots and engine configs are read with PyYAML; a JSON
snapshot is valid YAML and takes the same path.

Usage:
    from monitor_layout.utils import fs
    cfg = fs.load_yaml("engine.yaml")
    fs.atomic_write_text("out/calibration.json", text)
"""

import os
import tempfile
from pathlib import Path
from typing import Any, Union

import yaml

PathLike = Union[str, Path]


def ensure_dir(p: PathLike) -> Path:
    """Create *p* (and parents) if missing; return it as a Path."""
    p = Path(p)
    p.mkdir(parents=True, exist_ok=True)
    return p


def atomic_write_bytes(path: PathLike, data: bytes) -> None:
    """Replace *path* with *data* in a single rename.

    The bytes go to a uniquely named ``*.tmp`` sibling, are fsynced, and
    the sibling is renamed over *path*.  Two writers racing on the same
    target never share a temp file.

    Raises
    ------
    RuntimeError
        If writing or renaming fails.  The temp file is removed.
    """
    path = Path(path)
    directory = ensure_dir(path.parent)

    fd, tmp_name = tempfile.mkstemp(dir=directory, prefix=f".{path.name}.", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except OSError as e:
        tmp_path.unlink(missing_ok=True)
        raise RuntimeError(f"Could not replace {path}: {e}") from e


def atomic_write_text(path: PathLike, text: str, encoding: str = "utf-8") -> None:
    """Text variant of :func:`atomic_write_bytes`."""
    atomic_write_bytes(path, text.encode(encoding))


def load_yaml(path: PathLike) -> Any:
    """Parse a YAML (or JSON) document.

    Parameters
    ----------
    path : str | Path
        Document to read.

    Returns
    -------
    Any
        Parsed content, usually a dict.  ``None`` for an empty file.

    Raises
    ------
    FileNotFoundError
        If *path* does not exist.
    yaml.YAMLError
        If the content does not parse; the message names the file.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"No such document: {path}")

    text = path.read_text(encoding="utf-8")
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"{path}: {e}") from e
