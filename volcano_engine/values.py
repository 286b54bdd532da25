"""
volcano_engine/values.py -- Checked conversions for JSON-like records.

Persisted settings arrive as nested ``dict``/``list`` structures decoded
from JSON.  Every field read from such a record goes through one of the
helpers below, which match on the value's kind and fall back to an
explicit default instead of trusting the shape of the data.

Types
-----
JsonKind
    Enum of the six JSON value kinds.

Functions
---------
kind_of(value)
    → Classify a Python value as a JsonKind.

as_str / as_float / as_optional_float / as_bool
    → Scalar conversions with a fallback.

as_str_list / as_map / as_str_map / as_bool_map / as_str_list_map
    → Container conversions; malformed entries are skipped.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any


class JsonKind(Enum):
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    LIST = "list"
    MAP = "map"


def kind_of(value: Any) -> JsonKind | None:
    """Return the JSON kind of *value*, or ``None`` for foreign objects."""
    if value is None:
        return JsonKind.NULL
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return JsonKind.BOOL
    if isinstance(value, (int, float)):
        return JsonKind.NUMBER
    if isinstance(value, str):
        return JsonKind.STRING
    if isinstance(value, (list, tuple)):
        return JsonKind.LIST
    if isinstance(value, dict):
        return JsonKind.MAP
    return None


# ──────────────────────────────────────────────────────────────────────
# Scalars
# ──────────────────────────────────────────────────────────────────────

def as_str(value: Any, default: str = "") -> str:
    """Strings pass through, numbers are formatted, anything else is *default*."""
    kind = kind_of(value)
    if kind is JsonKind.STRING:
        return value
    if kind is JsonKind.NUMBER:
        return str(value)
    return default


def as_float(value: Any, default: float = 0.0) -> float:
    """Numbers and numeric strings become finite floats, else *default*."""
    kind = kind_of(value)
    if kind is JsonKind.NUMBER:
        result = float(value)
    elif kind is JsonKind.STRING:
        try:
            result = float(value.strip())
        except ValueError:
            return default
    else:
        return default
    return result if math.isfinite(result) else default


def as_optional_float(value: Any) -> float | None:
    """Like :func:`as_float` but ``None`` stands for "unset"."""
    if kind_of(value) not in (JsonKind.NUMBER, JsonKind.STRING):
        return None
    result = as_float(value, default=math.nan)
    return None if math.isnan(result) else result


def as_bool(value: Any, default: bool = False) -> bool:
    return value if kind_of(value) is JsonKind.BOOL else default


# ──────────────────────────────────────────────────────────────────────
# Containers
# ──────────────────────────────────────────────────────────────────────

def as_str_list(value: Any) -> list[str]:
    """Convert a list of scalars to strings.

    A bare string is treated as a one-element list, which is how older
    records store a single selected comparison.
    """
    kind = kind_of(value)
    if kind is JsonKind.STRING:
        return [value]
    if kind is not JsonKind.LIST:
        return []
    result = []
    for item in value:
        if kind_of(item) in (JsonKind.STRING, JsonKind.NUMBER):
            result.append(as_str(item))
    return result


def as_map(value: Any) -> dict[str, Any]:
    if kind_of(value) is not JsonKind.MAP:
        return {}
    return {str(k): v for k, v in value.items()}


def as_str_map(value: Any) -> dict[str, str]:
    result = {}
    for key, item in as_map(value).items():
        if kind_of(item) in (JsonKind.STRING, JsonKind.NUMBER):
            result[key] = as_str(item)
    return result


def as_bool_map(value: Any) -> dict[str, bool]:
    return {
        key: item
        for key, item in as_map(value).items()
        if kind_of(item) is JsonKind.BOOL
    }


def as_str_list_map(value: Any) -> dict[str, list[str]]:
    return {key: as_str_list(item) for key, item in as_map(value).items()}
