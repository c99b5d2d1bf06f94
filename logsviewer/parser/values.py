"""
Classification and text coercion of decoded JSON values.

Every lookup into a decoded log line yields one of the kinds in ValueKind.
Extraction code dispatches on the kind through small tables instead of
inspecting Python types at each call site.
"""
import json
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Dict, Mapping


class _Missing:
    def __repr__(self) -> str:
        return "MISSING"


MISSING = _Missing()


class ValueKind(Enum):
    MISSING = "missing"
    NULL = "null"
    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"


def kind_of(value: Any) -> ValueKind:
    if value is MISSING:
        return ValueKind.MISSING
    if value is None:
        return ValueKind.NULL
    if isinstance(value, str):
        return ValueKind.STRING
    # bool is a subclass of int
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, int):
        return ValueKind.INTEGER
    if isinstance(value, float):
        return ValueKind.FLOAT
    if isinstance(value, dict):
        return ValueKind.OBJECT
    if isinstance(value, list):
        return ValueKind.ARRAY
    raise TypeError(f"not a decoded JSON value: {type(value).__name__}")


def lookup(fields: Mapping[str, Any], name: str) -> Any:
    """Return fields[name], or MISSING when the key is absent."""
    return fields.get(name, MISSING)


def format_float(value: float) -> str:
    """Shortest positional rendering: 1.0 -> '1', 1e20 -> '100000000000000000000'."""
    return format(Decimal(repr(value)).normalize(), "f")


def compact_json(value: Any) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


_TEXT_RENDERERS: Dict[ValueKind, Callable[[Any], str]] = {
    ValueKind.MISSING: lambda v: "",
    ValueKind.NULL: lambda v: "",
    ValueKind.STRING: lambda v: v,
    ValueKind.BOOLEAN: lambda v: "true" if v else "false",
    ValueKind.INTEGER: str,
    ValueKind.FLOAT: format_float,
    ValueKind.OBJECT: compact_json,
    ValueKind.ARRAY: compact_json,
}


def to_text(value: Any) -> str:
    return _TEXT_RENDERERS[kind_of(value)](value)
