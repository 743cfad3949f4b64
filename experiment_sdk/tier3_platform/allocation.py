"""
experiment_sdk.tier3_platform.allocation
──────────────────────────────────────────
Turns a bucket value into a variation index.

Each variation owns the range ``[cum_i, cum_i + coverage * w_i)`` where
``cum_i`` is the sum of the preceding weights. Raising coverage only widens
ranges, so an identifier that is included at low coverage keeps its
variation as coverage grows.
"""
from __future__ import annotations

from experiment_sdk.tier0_core.hashing import namespace_bucket
from experiment_sdk.tier1_runtime.schemas import Namespace

NOT_INCLUDED = -1

BucketRange = tuple[float, float]


def equal_weights(n: int) -> list[float]:
    if n < 1:
        return []
    return [1 / n] * n


def bucket_ranges(
    n: int,
    coverage: float = 1.0,
    weights: list[float] | None = None,
) -> list[BucketRange]:
    """
    Weights are taken as given (no renormalization); a list that does not
    line up with *n* falls back to an even split.
    """
    coverage = min(max(coverage, 0.0), 1.0)
    if not weights or len(weights) != n:
        weights = equal_weights(n)

    ranges: list[BucketRange] = []
    cumulative = 0.0
    for w in weights:
        start = cumulative
        cumulative += w
        ranges.append((start, start + coverage * w))
    return ranges


def in_range(n: float, r: BucketRange) -> bool:
    return r[0] <= n < r[1]


def in_namespace(identifier: str, namespace: Namespace) -> bool:
    n = namespace_bucket(namespace.id, identifier)
    return namespace.start <= n < namespace.end


def choose_variation(n: float, ranges: list[BucketRange]) -> int:
    for i, r in enumerate(ranges):
        if in_range(n, r):
            return i
    return NOT_INCLUDED


def allocate(
    bucket: float,
    weights: list[float],
    coverage: float,
    *,
    identifier: str,
    namespace: Namespace | None = None,
) -> int:
    """Variation index for *bucket*, or NOT_INCLUDED."""
    if namespace is not None and not in_namespace(identifier, namespace):
        return NOT_INCLUDED
    return choose_variation(bucket, bucket_ranges(len(weights), coverage, weights))


__all__ = [
    "NOT_INCLUDED", "BucketRange", "equal_weights", "bucket_ranges",
    "in_range", "in_namespace", "choose_variation", "allocate",
]
