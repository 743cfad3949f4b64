"""
experiment_sdk.tier0_core.metrics
──────────────────────────────────
Counters with standard naming and labels for evaluation outcomes and
exposures. Exported through the host's Prometheus registry.

Minimal stack: prometheus-client
Configure via: EXPERIMENT_SDK_METRICS_ENABLED=true|false
"""
from __future__ import annotations

from typing import Callable

from prometheus_client import Counter

from experiment_sdk.tier0_core.config import get_config

# Standard labels applied to every metric, filled from ExperimentSDKConfig
_DEFAULT_LABELS = ["service", "env"]


def _default_label_values() -> dict[str, str]:
    config = get_config()
    return {"service": config.app_name, "env": config.environment}


def counter(name: str, description: str, labels: list[str] | None = None) -> Callable:
    """
    Create a counter with standard SDK labels.

    Usage:
        evaluations = counter("experiment_evaluations_total", "Evaluations", ["outcome"])
        evaluations(outcome="included").inc()
    """
    all_labels = _DEFAULT_LABELS + (labels or [])
    c = Counter(name, description, all_labels)

    def _counter(**extra_labels: str) -> Counter:
        return c.labels(**_default_label_values(), **extra_labels)

    return _counter


_evaluations = counter(
    "experiment_evaluations_total",
    "Experiment evaluations by terminal outcome",
    ["outcome"],
)
_exposures = counter(
    "experiment_exposures_total",
    "Exposure events delivered to the tracking callback",
)


def record_evaluation(outcome: str) -> None:
    """Count one evaluation. *outcome* is the engine's skip reason or "included"."""
    if get_config().metrics_enabled:
        _evaluations(outcome=outcome).inc()


def record_exposure() -> None:
    if get_config().metrics_enabled:
        _exposures().inc()


__sdk_export__ = {
    "surface": "public",
    "exports": ["counter", "record_evaluation", "record_exposure"],
    "description": "Prometheus counters for evaluations and exposures",
    "tier": "tier0_core",
    "module": "metrics",
}
