"""
experiment_sdk.tier0_core.errors
─────────────────────────────────
Standard error taxonomy and stable error codes.

Evaluation never raises to the host: these errors are raised inside a
component and caught at that component's boundary, where they are logged and
converted into "check failed" (malformed definition → excluded, condition
fault → non-match, callback fault → no-op). ConfigurationError is the one
error a host may see, and only when loading settings.
"""
from __future__ import annotations

from typing import Any


# ── Base error ────────────────────────────────────────────────────────────────

class ExperimentSDKError(Exception):
    """
    Base class for all SDK errors. Every error has:
    - code: stable machine-readable string (snake_case)
    - user_message: safe to surface to end users
    - detail: internal context, never shown to users
    """

    code: str = "internal_error"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "An unexpected error occurred.",
        detail: str | None = None,
        **metadata: Any,
    ) -> None:
        self.code = code or self.__class__.code
        self.user_message = user_message
        self.detail = detail or user_message
        self.metadata = metadata
        super().__init__(self.detail)

    def to_dict(self) -> dict:
        return {
            "error": {
                "code": self.code,
                "message": self.user_message,
            }
        }


# ── Typed error classes ───────────────────────────────────────────────────────

class MalformedExperimentError(ExperimentSDKError):
    """Experiment definition payload failed validation."""
    code = "malformed_experiment"

    def __init__(
        self,
        code: str | None = None,
        user_message: str = "Experiment definition is malformed.",
        fields: dict | None = None,
        **metadata: Any,
    ) -> None:
        self.fields = fields or {}
        super().__init__(code, user_message, **metadata)

    def to_dict(self) -> dict:
        d = super().to_dict()
        if self.fields:
            d["error"]["fields"] = self.fields
        return d


class ConditionError(ExperimentSDKError):
    """Targeting condition could not be evaluated (bad operator, bad regex)."""
    code = "condition_error"


class CallbackError(ExperimentSDKError):
    """A host-supplied callback or predicate raised."""
    code = "callback_error"


class ConfigurationError(ExperimentSDKError):
    """Misconfiguration detected when loading settings."""
    code = "configuration_error"


__sdk_export__ = {
    "surface": "public",
    "exports": [
        "ExperimentSDKError", "MalformedExperimentError", "ConditionError",
        "CallbackError", "ConfigurationError",
    ],
    "description": "Standard error taxonomy for all SDK modules",
    "tier": "tier0_core",
    "module": "errors",
}
