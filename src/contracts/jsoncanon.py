"""Canonical JSON encoding used for result digests.

Payloads produced by the solver only contain strings, integers, booleans,
``None``, lists and string-keyed mappings.  Keys are sorted, whitespace is
dropped and the output is UTF-8, so equal payloads always encode to equal
bytes regardless of insertion order.
"""

from __future__ import annotations

import hashlib
import json
import math
from typing import Any

__all__ = ["jcs_dump", "jcs_sha256"]


def _canonicalize(obj: Any) -> Any:
    if obj is None or isinstance(obj, (bool, int, str)):
        return obj
    if isinstance(obj, float):
        if math.isnan(obj) or math.isinf(obj):
            raise ValueError("NaN and Infinity are not permitted in canonical payloads")
        return int(obj) if obj.is_integer() else obj
    if isinstance(obj, (list, tuple)):
        return [_canonicalize(item) for item in obj]
    if isinstance(obj, dict):
        return {str(key): _canonicalize(obj[key]) for key in sorted(obj, key=str)}
    raise TypeError(f"Unsupported type for canonical JSON: {type(obj)!r}")


def jcs_dump(obj: Any) -> bytes:
    """Return canonical UTF-8 JSON bytes for ``obj``."""

    dumped = json.dumps(
        _canonicalize(obj),
        sort_keys=True,
        ensure_ascii=False,
        separators=(",", ":"),
        allow_nan=False,
    )
    return dumped.encode("utf-8")


def jcs_sha256(obj: Any) -> str:
    """Return the ``sha256`` digest of the canonical encoding of ``obj``."""

    return f"sha256-{hashlib.sha256(jcs_dump(obj)).hexdigest()}"
