"""
experiment_sdk._registry
─────────────────────────
Internal module registry — the single source of truth for which modules
exist and which names each one contributes to the public surface.

Adding a new module:
  1. Implement it in the right tier
  2. Add ``__sdk_export__`` to the module
  3. Add one tuple to TIER_MODULES below

After step 3 the module's exports are checked by ``collect_exports()``;
``experiment_sdk/__init__.py`` still requires a one-line explicit import.
"""
from __future__ import annotations

import importlib
from typing import Any

# ---------------------------------------------------------------------------
# Ordered list of (tier_path, module_name) for modules that declare exports.
# ---------------------------------------------------------------------------
TIER_MODULES: list[tuple[str, str]] = [
    # tier0_core: foundational layer
    ("tier0_core", "logging"),
    ("tier0_core", "errors"),
    ("tier0_core", "hashing"),
    ("tier0_core", "metrics"),
    # tier1_runtime: evaluation inputs
    ("tier1_runtime", "context"),
    ("tier1_runtime", "validate"),
    # tier3_platform: evaluation
    ("tier3_platform", "conditions"),
    ("tier3_platform", "experiments"),
]


def collect_exports(surface: str | None = None) -> dict[str, list[str]]:
    """
    Import every registered module and return ``{qualified_name: exports}``.

    Args:
        surface: Only include modules whose ``__sdk_export__["surface"]``
                 equals this value ("public" or "internal"). None = all.

    Raises:
        AttributeError: A module lists an export it does not define.
    """
    collected: dict[str, list[str]] = {}

    for tier_path, module_name in TIER_MODULES:
        qualified = f"experiment_sdk.{tier_path}.{module_name}"
        mod = importlib.import_module(qualified)

        export_meta: dict[str, Any] | None = getattr(mod, "__sdk_export__", None)
        if not export_meta:
            continue
        if surface is not None and export_meta.get("surface") != surface:
            continue

        for name in export_meta["exports"]:
            if not hasattr(mod, name):
                raise AttributeError(f"{qualified} exports missing name {name!r}")
        collected[qualified] = list(export_meta["exports"])

    return collected
