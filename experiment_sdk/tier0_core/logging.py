"""
experiment_sdk.tier0_core.logging
──────────────────────────────────
Structured logs with levels, automatic context injection (request_id,
experiment key), redaction, and sink routing.

Minimal stack: structlog (stdout JSON or console)
Configure via: EXPERIMENT_SDK_LOG_LEVEL, EXPERIMENT_SDK_LOG_FORMAT=json|console
"""
from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from experiment_sdk.tier0_core.config import get_config


# ── Configuration ─────────────────────────────────────────────────────────────

def _configure_structlog() -> None:
    # A host that already configured structlog keeps its own pipeline
    if structlog.is_configured():
        return

    config = get_config()
    log_level = config.log_level.upper()
    log_format = config.log_format.lower()

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        _redact_processor,
    ]

    if log_format == "console":
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    sdk_logger = logging.getLogger("experiment_sdk")
    sdk_logger.addHandler(handler)
    sdk_logger.setLevel(getattr(logging, log_level, logging.INFO))


# ── Redaction processor ───────────────────────────────────────────────────────

# Attribute trees are user-supplied; keep credentials out of evaluation traces.
_REDACT_KEYS = frozenset({
    "password", "passwd", "secret", "token", "api_key", "apikey",
    "authorization", "credential", "private_key", "access_token",
    "refresh_token", "client_secret", "ssn", "credit_card", "email",
})

_REDACTED = "[REDACTED]"


def _redact_processor(
    logger: Any, method: str, event_dict: dict
) -> dict:
    """Strip sensitive fields from log records before output."""
    for key in list(event_dict.keys()):
        if key.lower() in _REDACT_KEYS:
            event_dict[key] = _REDACTED
    return event_dict


# ── Public API ────────────────────────────────────────────────────────────────

_configured = False


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """
    Return a structured logger bound to the given name.

    Usage:
        log = get_logger(__name__)
        log.debug("experiment.skipped", experiment="checkout-cta", reason="draft")
        log.warning("tracking.callback_failed", experiment="checkout-cta")
    """
    global _configured
    if not _configured:
        _configure_structlog()
        _configured = True
    return structlog.get_logger(name or "experiment_sdk")


def bind_context(**kwargs: Any) -> None:
    """
    Bind key-value pairs to the current async/thread context.
    All subsequent log calls in this context will include these fields.

    Usage (in request middleware):
        bind_context(request_id="req_abc", user_id="u_123")
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    """Clear all context-bound log fields. Call at end of request."""
    structlog.contextvars.clear_contextvars()


__sdk_export__ = {
    "surface": "public",
    "exports": ["get_logger", "bind_context", "clear_context"],
    "description": "structlog logging with redaction and contextvars",
    "tier": "tier0_core",
    "module": "logging",
}
