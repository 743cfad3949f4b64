"""
experiment_sdk.tier3_platform.conditions
──────────────────────────────────────────
Targeting condition interpreter. Conditions use a safe subset of
document-database query syntax and are evaluated locally against the user's
attribute tree, never against a data store.

    {"country": {"$in": ["US", "CA"]}, "age": {"$gte": 18}}
    {"$or": [{"plan": "pro"}, {"beta": true}]}
    {"tags": {"$elemMatch": {"$eq": "early-adopter"}}}

Top-level keys are ANDed. Logical operators: $and $or $nor $not. Field
operators: $eq $ne $gt $gte $lt $lte $in $nin $exists $regex $size $all
$elemMatch $type $not. A bare value under a field key means equality; dotted
keys walk nested objects.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any

from experiment_sdk.tier0_core.errors import ConditionError
from experiment_sdk.tier0_core.logging import get_logger
from experiment_sdk.tier0_core.values import MISSING, get_path, stringify, type_tag
from experiment_sdk.tier2_reliability.fallback import with_fallback

logger = get_logger("experiment_sdk.conditions")


# ── Public API ────────────────────────────────────────────────────────────────

@with_fallback(default=False)
def matches(condition: Mapping[str, Any] | None, attributes: Mapping[str, Any]) -> bool:
    """
    Evaluate *condition* against *attributes*. Never raises: unknown operators
    and malformed conditions are logged and count as a non-match.
    """
    if not condition:
        return True
    return _eval_condition(attributes, condition)


# ── Logical layer ─────────────────────────────────────────────────────────────

def _as_list(conditions: Any) -> list:
    if isinstance(conditions, Mapping):
        return [conditions]
    if isinstance(conditions, (list, tuple)):
        return list(conditions)
    raise ConditionError(detail=f"expected a query or list of queries, got {conditions!r}")


def _eval_condition(attributes: Any, condition: Mapping[str, Any]) -> bool:
    if not isinstance(condition, Mapping):
        raise ConditionError(detail=f"condition must be an object, got {condition!r}")
    for key, value in condition.items():
        if key == "$or":
            if not _eval_or(attributes, _as_list(value)):
                return False
        elif key == "$nor":
            if _eval_or(attributes, _as_list(value)):
                return False
        elif key == "$and":
            if not all(_eval_condition(attributes, c) for c in _as_list(value)):
                return False
        elif key == "$not":
            if all(_eval_condition(attributes, c) for c in _as_list(value)):
                return False
        elif key.startswith("$"):
            raise ConditionError(detail=f"unknown logical operator {key}")
        elif not _eval_condition_value(value, get_path(attributes, key)):
            return False
    return True


def _eval_or(attributes: Any, conditions: list) -> bool:
    if not conditions:
        return True
    return any(_eval_condition(attributes, c) for c in conditions)


# ── Field layer ───────────────────────────────────────────────────────────────

def _is_operator_object(obj: Any) -> bool:
    return (
        isinstance(obj, Mapping)
        and len(obj) > 0
        and all(isinstance(k, str) and k.startswith("$") for k in obj)
    )


def _eval_condition_value(condition_value: Any, attribute_value: Any) -> bool:
    if _is_operator_object(condition_value):
        return all(
            _eval_operator(op, attribute_value, expected)
            for op, expected in condition_value.items()
        )
    return _equals(attribute_value, condition_value)


def _equals(actual: Any, expected: Any) -> bool:
    # Absent fields compare equal to null only
    if actual is MISSING:
        return expected is None
    tag = type_tag(actual)
    if tag != type_tag(expected):
        return False
    if tag == "array":
        return len(actual) == len(expected) and all(
            _equals(a, e) for a, e in zip(actual, expected)
        )
    if tag == "object":
        return actual.keys() == expected.keys() and all(
            _equals(actual[k], expected[k]) for k in actual
        )
    return actual == expected


def _compare(op: str, actual: Any, expected: Any) -> bool:
    tag = type_tag(actual)
    if tag not in ("number", "string") or tag != type_tag(expected):
        return False
    if op == "$gt":
        return actual > expected
    if op == "$gte":
        return actual >= expected
    if op == "$lt":
        return actual < expected
    return actual <= expected


def _regex(pattern: Any, actual: Any) -> bool:
    if actual is MISSING or actual is None:
        return False
    try:
        regex = re.compile(pattern)
    except (re.error, TypeError) as exc:
        logger.warning("condition.invalid_regex", pattern=repr(pattern), error=str(exc))
        return False
    text = actual if isinstance(actual, str) else stringify(actual)
    return regex.search(text) is not None


def _in(actual: Any, expected: Any) -> bool:
    if not isinstance(expected, (list, tuple)):
        raise ConditionError(detail="$in/$nin expects a list")
    if actual is MISSING:
        return False
    if type_tag(actual) == "array":
        return any(_equals(a, e) for a in actual for e in expected)
    return any(_equals(actual, e) for e in expected)


def _elem_match(condition: Any, actual: Any) -> bool:
    if type_tag(actual) != "array":
        return False
    for item in actual:
        if _is_operator_object(condition):
            if _eval_condition_value(condition, item):
                return True
        elif isinstance(item, Mapping) and _eval_condition(item, condition):
            return True
    return False


def _all(expected: Any, actual: Any) -> bool:
    if type_tag(actual) != "array":
        return False
    if not isinstance(expected, (list, tuple)):
        raise ConditionError(detail="$all expects a list")
    return all(
        any(_eval_condition_value(cond, item) for item in actual)
        for cond in expected
    )


def _eval_operator(op: str, actual: Any, expected: Any) -> bool:
    if op == "$eq":
        return _equals(actual, expected)
    if op == "$ne":
        return not _equals(actual, expected)
    if op in ("$gt", "$gte", "$lt", "$lte"):
        return _compare(op, actual, expected)
    if op == "$in":
        return _in(actual, expected)
    if op == "$nin":
        return not _in(actual, expected)
    if op == "$exists":
        present = actual is not MISSING and actual is not None
        return present if expected else not present
    if op == "$regex":
        return _regex(expected, actual)
    if op == "$size":
        if type_tag(actual) != "array":
            return False
        return _eval_condition_value(expected, len(actual))
    if op == "$all":
        return _all(expected, actual)
    if op == "$elemMatch":
        return _elem_match(expected, actual)
    if op == "$type":
        return type_tag(actual) == expected
    if op == "$not":
        return not _eval_condition_value(expected, actual)
    raise ConditionError(detail=f"unknown operator {op}")


__all__ = ["matches"]

__sdk_export__ = {
    "surface": "public",
    "exports": ["matches"],
    "description": "Targeting condition interpreter",
    "tier": "tier3_platform",
    "module": "conditions",
}
