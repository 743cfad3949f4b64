"""
experiment_sdk.tier3_platform.experiments
───────────────────────────────────────────
A/B and multi-variate experiment assignment. Assigns users to variations
deterministically (same user, same definition, same attributes → same
variation in every runtime), applies targeting and override rules, reports
exposures, and notifies subscribers when an assignment changes.

Requires no external service — works entirely in-process. The host creates
one ExperimentEngine per Context and passes it explicitly to whatever needs
it; there is no global current instance.

Usage::

    engine = ExperimentEngine(Context(attributes={"id": "u_123"}))
    result = engine.run({"key": "checkout-cta", "variations": ["blue", "green"]})
    if result.in_experiment:
        render_button(result.value)
"""
from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from experiment_sdk.tier0_core.config import get_config
from experiment_sdk.tier0_core.errors import MalformedExperimentError
from experiment_sdk.tier0_core.hashing import bucket
from experiment_sdk.tier0_core.logging import get_logger
from experiment_sdk.tier0_core.metrics import record_evaluation
from experiment_sdk.tier0_core.values import normalize_attributes, stringify
from experiment_sdk.tier1_runtime.context import Context, Renderer
from experiment_sdk.tier1_runtime.schemas import (
    Assignment,
    ExperimentDefinition,
    ExperimentResult,
)
from experiment_sdk.tier1_runtime.url import url_matches
from experiment_sdk.tier1_runtime.validate import parse_experiment
from experiment_sdk.tier2_reliability.fallback import guarded_call
from experiment_sdk.tier3_platform.allocation import NOT_INCLUDED, allocate, equal_weights
from experiment_sdk.tier3_platform.conditions import matches
from experiment_sdk.tier3_platform.notifications import (
    Subscriber,
    SubscriberList,
    SubscriptionToken,
)
from experiment_sdk.tier3_platform.overrides import forced_override, resolve
from experiment_sdk.tier3_platform.tracking import ExposureTracker

logger = get_logger("experiment_sdk.experiments")

INCLUDED = "included"


class ExperimentEngine:
    """Runs experiment evaluations for a single Context and owns its assignment table."""

    def __init__(self, context: Context | None = None, *, debug: bool | None = None) -> None:
        self.context = context if context is not None else Context()
        self.debug = get_config().debug if debug is None else debug
        self._assigned: dict[str, Assignment] = {}
        self._tracker = ExposureTracker()
        self._subscribers = SubscriberList()

    # ── Evaluation ────────────────────────────────────────────────────────────

    def run(self, experiment: ExperimentDefinition | Mapping[str, Any]) -> ExperimentResult:
        """
        Evaluate *experiment* for the current Context. Never raises: malformed
        definitions and failing host callbacks degrade to an excluded result.
        """
        try:
            base = parse_experiment(experiment)
        except MalformedExperimentError as exc:
            logger.warning("experiment.malformed", fields=exc.fields)
            record_evaluation("malformed")
            result = self._unparseable_result(experiment)
            key = experiment.get("key") if isinstance(experiment, Mapping) else None
            if isinstance(key, str) and key:
                self._record(self._placeholder_definition(experiment, key, result), result)
            return result

        definition, result, outcome = self._evaluate(base)
        record_evaluation(outcome)
        self._record(definition, result)
        return result

    def _evaluate(
        self, base: ExperimentDefinition
    ) -> tuple[ExperimentDefinition, ExperimentResult, str]:
        ctx = self.context
        self._trace("experiment.evaluating", experiment=base.key)

        if not ctx.enabled:
            return self._skip(base, "disabled")

        definition = resolve(base, ctx)
        problems = definition.problems()
        if problems:
            logger.warning("experiment.malformed", experiment=definition.key, problems=problems)
            return self._skip(definition, "malformed")

        url = ctx.resolve_url()
        forced = forced_override(definition, ctx, url)
        if forced is not None:
            self._trace(
                "experiment.forced",
                experiment=definition.key,
                variation=forced.variation_id,
                source=forced.source,
            )
            result = self._result(definition, forced.variation_id)
            return definition, result, f"forced_{forced.source}"

        if definition.status == "draft":
            return self._skip(definition, "draft")
        if definition.status == "stopped" and definition.force is None:
            return self._skip(definition, "stopped")
        if not definition.active:
            return self._skip(definition, "inactive")

        if definition.url and not url_matches(definition.url, url):
            return self._skip(definition, "url")
        if definition.groups and not any((ctx.groups or {}).get(g) for g in definition.groups):
            return self._skip(definition, "groups")
        if definition.condition and not matches(
            definition.condition, normalize_attributes(ctx.attributes)
        ):
            return self._skip(definition, "condition")
        if definition.include is not None:
            outcome = guarded_call(
                definition.include,
                event="include.failed",
                log_fields={"experiment": definition.key},
            )
            if not outcome.value_or(False):
                return self._skip(definition, "include")

        if ctx.qa_mode and definition.force is None:
            return self._skip(definition, "qa_mode")

        hash_value = ctx.hash_value(definition.hash_attribute)
        if hash_value is None or hash_value == "":
            return self._skip(definition, "missing_hash_value")

        identifier = stringify(hash_value)
        weights = definition.weights or equal_weights(len(definition.variations))
        assigned = allocate(
            bucket(definition.key, identifier),
            weights,
            definition.coverage,
            identifier=identifier,
            namespace=definition.namespace,
        )
        if assigned == NOT_INCLUDED:
            return self._skip(definition, "not_covered")

        # An authored force only applies to users the allocation covers
        if definition.force is not None:
            self._trace("experiment.forced", experiment=definition.key, variation=definition.force)
            return definition, self._result(definition, definition.force), "forced_definition"

        result = self._result(definition, assigned, in_experiment=True)
        self._tracker.track(definition, result, ctx.tracking_callback)
        self._trace("experiment.assigned", experiment=definition.key, variation=assigned)
        return definition, result, INCLUDED

    # ── Results ───────────────────────────────────────────────────────────────

    def _result(
        self,
        definition: ExperimentDefinition,
        variation_id: int = 0,
        *,
        in_experiment: bool = False,
    ) -> ExperimentResult:
        if variation_id < 0 or variation_id >= len(definition.variations):
            variation_id = 0
            in_experiment = False
        return ExperimentResult(
            in_experiment=in_experiment,
            variation_id=variation_id,
            value=definition.variations[variation_id] if definition.variations else None,
            hash_attribute=definition.hash_attribute,
            hash_value=self.context.hash_value(definition.hash_attribute),
        )

    def _skip(
        self, definition: ExperimentDefinition, reason: str
    ) -> tuple[ExperimentDefinition, ExperimentResult, str]:
        self._trace("experiment.skipped", experiment=definition.key, reason=reason)
        return definition, self._result(definition), reason

    def _unparseable_result(self, experiment: Any) -> ExperimentResult:
        variations = experiment.get("variations") if isinstance(experiment, Mapping) else None
        hash_attribute = "id"
        if isinstance(experiment, Mapping):
            hash_attribute = experiment.get("hashAttribute") or experiment.get("hash_attribute") or "id"
        if not isinstance(hash_attribute, str):
            hash_attribute = "id"
        return ExperimentResult(
            in_experiment=False,
            variation_id=0,
            value=variations[0] if isinstance(variations, list) and variations else None,
            hash_attribute=hash_attribute,
            hash_value=self.context.hash_value(hash_attribute),
        )

    @staticmethod
    def _placeholder_definition(
        experiment: Mapping[str, Any], key: str, result: ExperimentResult
    ) -> ExperimentDefinition:
        """Unvalidated stand-in so a keyed but malformed payload still gets a table row."""
        variations = experiment.get("variations")
        return ExperimentDefinition.model_construct(
            key=key,
            variations=variations if isinstance(variations, list) else [],
            hash_attribute=result.hash_attribute,
        )

    def _record(self, definition: ExperimentDefinition, result: ExperimentResult) -> None:
        prev = self._assigned.get(definition.key)
        self._assigned[definition.key] = Assignment(experiment=definition, result=result)
        if (
            prev is None
            or prev.result.in_experiment != result.in_experiment
            or prev.result.variation_id != result.variation_id
        ):
            self._subscribers.notify(definition, result)

    def _trace(self, event: str, **fields: Any) -> None:
        if self.debug:
            logger.info(event, **fields)
        else:
            logger.debug(event, **fields)

    # ── Context updates ───────────────────────────────────────────────────────

    def set_attributes(self, attributes: Mapping[str, Any]) -> None:
        self.context.attributes = dict(attributes)
        self._render()

    def get_attributes(self) -> dict[str, Any]:
        return self.context.attributes

    def force_variation(self, key: str, variation: int) -> None:
        """Pin *key* to *variation* for this Context and re-render."""
        self.context.forced_variations[key] = variation
        self._render()

    def set_renderer(self, renderer: Renderer | None) -> None:
        self.context.renderer = renderer

    def _render(self) -> None:
        if self.context.renderer is not None:
            guarded_call(self.context.renderer, event="renderer.failed")

    # ── Subscriptions & results ───────────────────────────────────────────────

    def subscribe(self, callback: Subscriber) -> SubscriptionToken:
        """Call *callback(experiment, result)* whenever an assignment changes."""
        return self._subscribers.subscribe(callback)

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        return self._subscribers.unsubscribe(token)

    def get_all_results(self) -> dict[str, Assignment]:
        """Latest assignment per experiment key, in first-evaluation order."""
        return dict(self._assigned)

    def destroy(self) -> None:
        """Release subscriptions, the renderer and all recorded assignments."""
        self._subscribers.clear()
        self._assigned.clear()
        self._tracker.clear()
        self.context.renderer = None


__all__ = ["ExperimentEngine"]

__sdk_export__ = {
    "surface": "public",
    "exports": ["ExperimentEngine"],
    "description": "Deterministic experiment assignment and exposure tracking",
    "tier": "tier3_platform",
    "module": "experiments",
}
