"""
experiment_sdk.tier0_core.hashing
──────────────────────────────────
Deterministic bucketing hash shared by every SDK runtime.

The same (identifier, key) pair must land in the same bucket in every
language, so the algorithm is fixed: 32-bit FNV-1a over the UTF-8 bytes of
the seed, reduced to three decimal places.
"""
from __future__ import annotations

_FNV32_OFFSET_BASIS = 0x811C9DC5
_FNV32_PRIME = 0x01000193
_UINT32_MASK = 0xFFFFFFFF


def fnv1a32(data: str) -> int:
    """32-bit FNV-1a of the UTF-8 encoding of *data*."""
    hval = _FNV32_OFFSET_BASIS
    for byte in data.encode("utf-8"):
        hval ^= byte
        hval = (hval * _FNV32_PRIME) & _UINT32_MASK
    return hval


def hash(seed: str) -> float:  # noqa: A001
    """Map *seed* to a float in [0, 1) with 0.001 resolution."""
    return (fnv1a32(seed) % 1000) / 1000


def bucket(key: str, identifier: str) -> float:
    """Experiment bucket for *identifier*. Seed is identifier then key, no separator."""
    return hash(identifier + key)


def namespace_bucket(namespace_id: str, identifier: str) -> float:
    """Independent bucket used to test namespace membership."""
    return hash(identifier + "__" + namespace_id)


__all__ = ["fnv1a32", "hash", "bucket", "namespace_bucket"]

__sdk_export__ = {
    "surface": "public",
    "exports": ["hash", "bucket", "namespace_bucket"],
    "description": "FNV-1a bucketing hash shared across runtimes",
    "tier": "tier0_core",
    "module": "hashing",
}
