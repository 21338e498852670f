"""
This module defines how dynamically-typed JSON settings are classified and converted.

Settings are stored exactly as `json` decodes them: `str`, `int`/`float`, `bool`,
`dict`, `list` or `None`. The helpers here give those values a kind name for error
messages and implement the conversion rules used by the typed accessors.
"""
# sealedconfig/models.py

import json
import math

STRING = "string"
NUMBER = "number"
BOOLEAN = "boolean"
MAP = "map"
ARRAY = "array"
NULL = "null"


def kind_of(value) -> str:
    """Returns the JSON kind name of a decoded value.

    Args:
        value: A value as produced by `json.loads`.

    Returns:
        str: One of the module-level kind constants, or the Python type name for
             anything `json` would not produce.
    """
    # bool is a subclass of int, so it has to be checked first.
    if isinstance(value, bool):
        return BOOLEAN
    if isinstance(value, (int, float)):
        return NUMBER
    if isinstance(value, str):
        return STRING
    if isinstance(value, dict):
        return MAP
    if isinstance(value, (list, tuple)):
        return ARRAY
    if value is None:
        return NULL
    return type(value).__name__


def is_integer_like(value) -> bool:
    return not isinstance(value, bool) and isinstance(value, (int, float))


def as_int(value) -> int:
    """Converts a JSON number to an int.

    JSON has no separate integer type, so whole numbers often come back as floats.
    Floats are truncated toward zero, including ones with a fractional part.

    Raises:
        ValueError: For NaN or infinite floats.
    """
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValueError(f"cannot convert {value} to int")
        return int(value)
    return value


def ensure_serializable(value):
    """Returns `value` as it will read back from disk, or raises `TypeError`.

    The result is a fresh copy passed through the JSON encoder, so tuples become lists
    and non-string map keys become strings, exactly as they would after a reload.
    """
    try:
        text = json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise TypeError(f"value of type {type(value).__name__} is not JSON serializable") from exc
    return json.loads(text)
