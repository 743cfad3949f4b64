"""
experiment_sdk
──────────────
Stable top-level exports. Import from here, not from sub-modules directly.
Every name exported here is part of the public API and subject to semver.
"""
from experiment_sdk.tier0_core.logging import get_logger
from experiment_sdk.tier0_core.errors import (
    ExperimentSDKError,
    MalformedExperimentError,
    ConditionError,
    CallbackError,
    ConfigurationError,
)
from experiment_sdk.tier0_core.config import get_config, ExperimentSDKConfig
from experiment_sdk.tier0_core.hashing import hash, bucket, namespace_bucket
from experiment_sdk.tier0_core.metrics import counter

from experiment_sdk.tier1_runtime.context import (
    Context,
    get_request_url,
    set_request_url,
)
from experiment_sdk.tier1_runtime.schemas import (
    ExperimentDefinition,
    ExperimentOverride,
    ExperimentResult,
    Assignment,
    Namespace,
)
from experiment_sdk.tier1_runtime.validate import parse_experiment, parse_override

from experiment_sdk.tier3_platform.conditions import matches
from experiment_sdk.tier3_platform.notifications import SubscriptionToken
from experiment_sdk.tier3_platform.experiments import ExperimentEngine

__version__ = "0.1.0"
__all__ = [
    # logging
    "get_logger",
    # errors
    "ExperimentSDKError", "MalformedExperimentError", "ConditionError",
    "CallbackError", "ConfigurationError",
    # config
    "get_config", "ExperimentSDKConfig",
    # hashing
    "hash", "bucket", "namespace_bucket",
    # metrics
    "counter",
    # context
    "Context", "get_request_url", "set_request_url",
    # schemas
    "ExperimentDefinition", "ExperimentOverride", "ExperimentResult",
    "Assignment", "Namespace",
    # validate
    "parse_experiment", "parse_override",
    # conditions
    "matches",
    # engine
    "ExperimentEngine", "SubscriptionToken",
]
