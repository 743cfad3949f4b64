"""
experiment_sdk test configuration.

All tests run in-process with no external services. Override by setting
environment variables before running pytest.
"""
from __future__ import annotations

import os

import pytest

# ── Force test defaults for all tests ─────────────────────────────────────
# These must be set before any experiment_sdk modules are imported.

os.environ.setdefault("EXPERIMENT_SDK_ENVIRONMENT", "test")
os.environ.setdefault("EXPERIMENT_SDK_LOG_LEVEL", "WARNING")
os.environ.setdefault("EXPERIMENT_SDK_LOG_FORMAT", "console")
os.environ.setdefault("EXPERIMENT_SDK_METRICS_ENABLED", "true")


# ── Fixtures ───────────────────────────────────────────────────────────────

@pytest.fixture(autouse=True)
def reset_module_singletons():
    """
    Reset cached config and the ambient request URL between tests.
    This ensures each test gets fresh settings with no state bleed.
    """
    from experiment_sdk.tier0_core.config import _reset_config
    from experiment_sdk.tier1_runtime.context import set_request_url

    _reset_config()
    set_request_url(None)

    yield

    _reset_config()
    set_request_url(None)


@pytest.fixture
def context():
    """Return a Context for user "1"."""
    from experiment_sdk.tier1_runtime.context import Context
    return Context(user={"id": "1"})


@pytest.fixture
def engine(context):
    """Return an ExperimentEngine bound to the ``context`` fixture."""
    from experiment_sdk.tier3_platform.experiments import ExperimentEngine
    eng = ExperimentEngine(context)
    yield eng
    eng.destroy()


@pytest.fixture
def tracked(context):
    """Install a recording tracking callback; returns the list of calls."""
    calls: list[tuple] = []
    context.tracking_callback = lambda experiment, result: calls.append((experiment, result))
    return calls
