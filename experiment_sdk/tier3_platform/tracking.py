"""
experiment_sdk.tier3_platform.tracking
────────────────────────────────────────
Exposure tracking. An exposure is reported to the host's tracking callback
at most once per (hash attribute, hash value, experiment key, variation) for
the lifetime of the engine. A callback that raises is logged and its
exposure stays unreported, so the next evaluation tries again.
"""
from __future__ import annotations

from experiment_sdk.tier0_core.metrics import record_exposure
from experiment_sdk.tier1_runtime.context import TrackingCallback
from experiment_sdk.tier1_runtime.schemas import ExperimentDefinition, ExperimentResult
from experiment_sdk.tier2_reliability.fallback import guarded_call

ExposureKey = tuple[str, str, str, int]


class ExposureTracker:
    def __init__(self) -> None:
        self._tracked: set[ExposureKey] = set()

    @staticmethod
    def exposure_key(experiment: ExperimentDefinition, result: ExperimentResult) -> ExposureKey:
        return (
            result.hash_attribute,
            str(result.hash_value),
            experiment.key,
            result.variation_id,
        )

    def track(
        self,
        experiment: ExperimentDefinition,
        result: ExperimentResult,
        callback: TrackingCallback | None,
    ) -> bool:
        """Deliver the exposure if it is new. Returns True if the callback fired."""
        if callback is None or not result.in_experiment:
            return False
        key = self.exposure_key(experiment, result)
        if key in self._tracked:
            return False
        outcome = guarded_call(
            callback,
            experiment,
            result,
            event="tracking.callback_failed",
            log_fields={"experiment": experiment.key},
        )
        if not outcome.ok:
            return False
        self._tracked.add(key)
        record_exposure()
        return True

    def clear(self) -> None:
        self._tracked.clear()

    def __len__(self) -> int:
        return len(self._tracked)


__all__ = ["ExposureKey", "ExposureTracker"]
