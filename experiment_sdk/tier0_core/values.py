"""
experiment_sdk.tier0_core.values
─────────────────────────────────
Attribute value model. User attributes arrive as untyped JSON-like trees;
everything the condition evaluator sees is first normalized into one of six
tagged shapes:

    null | boolean | number | string | array | object

so operators can dispatch on ``type_tag()`` instead of probing arbitrary
host objects.
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

AttributeValue = Union[
    None,
    bool,
    int,
    float,
    str,
    list["AttributeValue"],
    dict[str, "AttributeValue"],
]
Attributes = dict[str, AttributeValue]


class _Missing:
    """Marker for a field that is absent from the attribute tree."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


def type_tag(value: Any) -> str:
    """Return the tag for *value*; "undefined" for MISSING, "unknown" otherwise."""
    if value is MISSING:
        return "undefined"
    if value is None:
        return "null"
    # bool is a subclass of int, so it must be tested first
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return "unknown"


def normalize(value: Any) -> AttributeValue:
    """
    Convert a host value into the attribute tree shape. Tuples and sets become
    lists, mappings become plain dicts with string keys, other objects are
    coerced to their string form.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, Mapping):
        return {str(k): normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return [normalize(v) for v in sorted(value, key=repr)]
    return str(value)


def normalize_attributes(attributes: Mapping[str, Any] | None) -> Attributes:
    if not attributes:
        return {}
    return {str(k): normalize(v) for k, v in attributes.items()}


def stringify(value: Any) -> str:
    """String form used for hash identifiers and $regex, matching other runtimes."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def get_path(attributes: Mapping[str, Any], path: str) -> Any:
    """Walk a dotted *path* through nested mappings; MISSING if any hop is absent."""
    current: Any = attributes
    for segment in path.split("."):
        if isinstance(current, Mapping) and segment in current:
            current = current[segment]
        else:
            return MISSING
    return current


__all__ = [
    "AttributeValue", "Attributes", "MISSING", "type_tag", "normalize",
    "normalize_attributes", "stringify", "get_path",
]
