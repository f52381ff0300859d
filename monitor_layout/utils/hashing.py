"""Layout fingerprints.

A fingerprint is the SHA-256 of a record's canonical JSON (sorted keys,
no whitespace, UTF-8).  Resolving the same snapshot twice gives the same
fingerprint, so repeated runs are easy to compare in the logs.

Usage:
    from monitor_layout.utils import hashing
    fp = hashing.hash_dict({"v": 1, "m": records})
    logger.info("layout %s", hashing.short_fingerprint(fp))
"""

import hashlib
import json
from typing import Any, Mapping


def sha256_string(s: str) -> str:
    """Hex SHA-256 of the UTF-8 encoding of *s*."""
    return hashlib.sha256(s.encode("utf-8")).hexdigest()


def canonical_json(record: Mapping[str, Any]) -> str:
    """Key-sorted compact JSON; equal records give equal text."""
    return json.dumps(record, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def hash_dict(record: Mapping[str, Any]) -> str:
    """Fingerprint a JSON-serializable record.

    Examples
    --------
    >>> hash_dict({"b": 1, "a": 2}) == hash_dict({"a": 2, "b": 1})
    True
    """
    return sha256_string(canonical_json(record))


def short_fingerprint(digest: str, length: int = 12) -> str:
    """Leading *length* hex digits, for log lines."""
    return digest[:length]
