"""
Canonical request hashing.

Derives deterministic cache keys from request-shaped values, independent of
the insertion order of mapping keys.
"""

import dataclasses
import hashlib
import json
import math
from datetime import date, datetime, time
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping

FUNCTION_SENTINEL = '"[Function]"'
OBJECT_SENTINEL = '"[Object]"'


def _render_float(value: float) -> str:
    if not math.isfinite(value):
        return json.dumps(str(value))
    if value.is_integer():
        return str(int(value))
    return repr(value)


def _render_mapping(items) -> str:
    pairs = sorted(
        (((key if isinstance(key, str) else str(key)), val) for key, val in items),
        key=lambda pair: pair[0],
    )
    return "{" + ",".join(f"{json.dumps(key)}:{stable_render(val)}" for key, val in pairs) + "}"


def stable_render(value: Any) -> str:
    """Render a value into its canonical string form.

    Mappings render with sorted keys and sequences keep their order. Other
    objects render through ``model_dump()``/``_asdict()``, their own
    ``__str__``, or their instance attributes, in that order. Callables and
    objects with none of these collapse to a fixed sentinel.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return stable_render(value.value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return _render_float(value)
    if isinstance(value, str):
        return json.dumps(value)
    if isinstance(value, Decimal):
        return json.dumps(str(value))
    if isinstance(value, (datetime, date, time)):
        return json.dumps(value.isoformat())
    if isinstance(value, (bytes, bytearray)):
        return json.dumps(bytes(value).hex())
    if isinstance(value, BaseException):
        return _render_mapping([("name", type(value).__name__), ("message", str(value))])
    if isinstance(value, Mapping):
        return _render_mapping(value.items())
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(stable_render(item) for item in value) + "]"
    if isinstance(value, (set, frozenset)):
        return "[" + ",".join(sorted(stable_render(item) for item in value)) + "]"
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _render_mapping(
            (field.name, getattr(value, field.name)) for field in dataclasses.fields(value)
        )
    if not isinstance(value, type):
        for method in ("model_dump", "_asdict"):
            dump = getattr(value, method, None)
            if callable(dump):
                return _render_mapping(dump().items())
    if callable(value):
        return FUNCTION_SENTINEL
    if type(value).__str__ is not object.__str__:
        return json.dumps(str(value))
    if hasattr(value, "__dict__"):
        # Type name keeps equal-state instances of different classes apart.
        return _render_mapping([("__type__", type(value).__qualname__), *vars(value).items()])
    return OBJECT_SENTINEL


def hash_request(request: Any) -> str:
    """Compute the SHA-256 hex digest of a request's canonical rendering.

    Args:
        request: Any request-shaped value (dicts, lists, scalars, dates...)

    Returns:
        64-character lowercase hex string
    """
    serialized = stable_render(request)
    return hashlib.sha256(serialized.encode("utf-8")).hexdigest()
