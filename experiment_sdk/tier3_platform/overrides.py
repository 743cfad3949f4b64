"""
experiment_sdk.tier3_platform.overrides
─────────────────────────────────────────
Override resolution. Three host-side mechanisms can redirect an evaluation
without touching the deployed definition:

  - ``?<experiment-key>=<index>`` in the current URL (debug/QA; never tracked)
  - ``Context.forced_variations[key]``
  - ``Context.overrides[key]``, a partial definition patched over the base

The first two bypass allocation entirely. The patch is applied before any
eligibility check, so a patched ``force`` behaves like an authored one.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from experiment_sdk.tier0_core.errors import MalformedExperimentError
from experiment_sdk.tier0_core.logging import get_logger
from experiment_sdk.tier1_runtime.context import Context
from experiment_sdk.tier1_runtime.schemas import ExperimentDefinition
from experiment_sdk.tier1_runtime.url import query_param
from experiment_sdk.tier1_runtime.validate import parse_override

logger = get_logger("experiment_sdk.overrides")


@dataclass(frozen=True)
class ForcedOverride:
    variation_id: int
    source: Literal["query_string", "context"]


def query_string_override(key: str, url: str | None, n_variations: int) -> int | None:
    """Variation index forced via the URL, or None if absent or unusable."""
    raw = query_param(url, key)
    if raw is None or not raw.isdigit():
        return None
    variation = int(raw)
    if variation >= n_variations:
        return None
    return variation


def resolve(base: ExperimentDefinition, ctx: Context) -> ExperimentDefinition:
    """
    Patch *base* with ``ctx.overrides[base.key]``. Fields set on the override
    replace the base; a malformed override is logged and ignored.
    """
    raw = (ctx.overrides or {}).get(base.key)
    if not raw:
        return base
    try:
        override = parse_override(raw)
    except MalformedExperimentError as exc:
        logger.warning(
            "override.malformed",
            experiment=base.key,
            fields=exc.fields,
        )
        return base
    update = {name: getattr(override, name) for name in override.model_fields_set}
    if not update:
        return base
    return base.model_copy(update=update)


def forced_override(
    definition: ExperimentDefinition,
    ctx: Context,
    url: str | None,
) -> ForcedOverride | None:
    """Query string wins over ``ctx.forced_variations``."""
    qs = query_string_override(definition.key, url, len(definition.variations))
    if qs is not None:
        return ForcedOverride(variation_id=qs, source="query_string")
    forced = (ctx.forced_variations or {}).get(definition.key)
    if forced is None:
        return None
    # bool is an int subclass but never a variation index
    if not isinstance(forced, int) or isinstance(forced, bool):
        logger.warning(
            "forced_variation.invalid",
            experiment=definition.key,
            value=repr(forced),
        )
        return None
    return ForcedOverride(variation_id=forced, source="context")


__all__ = ["ForcedOverride", "query_string_override", "resolve", "forced_override"]
