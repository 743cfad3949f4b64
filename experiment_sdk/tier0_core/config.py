"""
experiment_sdk.tier0_core.config
──────────────────────────────────
Typed configuration with env layering. Reads from .env → environment
variables. All fields are typed via Pydantic. Invalid values raise
ConfigurationError when the config is first loaded, not mid-evaluation.

Minimal stack: pydantic-settings + python-dotenv
All env vars are prefixed with EXPERIMENT_SDK_.
"""
from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError as PydanticValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from experiment_sdk.tier0_core.errors import ConfigurationError


class ExperimentSDKConfig(BaseSettings):
    """
    Process-wide defaults for experiment evaluation. A Context created without
    explicit values picks these up.
    """

    model_config = SettingsConfigDict(
        env_prefix="EXPERIMENT_SDK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ── Application ───────────────────────────────────────────────────────────
    app_name: str = "experiment-sdk"
    environment: str = "development"

    # ── Evaluation defaults ───────────────────────────────────────────────────
    enabled: bool = True
    qa_mode: bool = False
    debug: bool = False
    # Fallback for URL targeting when neither the Context nor the current
    # request carries a URL.
    url: str | None = None

    # ── Logging ───────────────────────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: str = "json"

    # ── Metrics ───────────────────────────────────────────────────────────────
    metrics_enabled: bool = Field(default=True)

    @field_validator("environment")
    @classmethod
    def validate_env(cls, v: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}, got {v!r}")
        return v.lower()

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        if v.lower() not in {"json", "console"}:
            raise ValueError(f"log_format must be json or console, got {v!r}")
        return v.lower()

    @property
    def is_test(self) -> bool:
        return self.environment == "test"


@lru_cache(maxsize=1)
def get_config() -> ExperimentSDKConfig:
    """
    Return the singleton SDK config. Cached after first call.
    Call _reset_config() in tests to pick up new env vars.
    """
    try:
        return ExperimentSDKConfig()
    except PydanticValidationError as exc:
        fields = {
            ".".join(str(loc) for loc in err["loc"]): err["msg"]
            for err in exc.errors()
        }
        raise ConfigurationError(
            user_message="Invalid experiment SDK configuration.",
            detail=f"Invalid settings: {fields}",
            fields=fields,
        ) from exc


def _reset_config() -> None:
    """For tests — clear the config cache."""
    get_config.cache_clear()
