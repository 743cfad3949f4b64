"""
experiment_sdk.tier2_reliability.fallback
───────────────────────────────────────────
Standardized fallback behavior around host-supplied code. Tracking callbacks,
subscribers, renderers and custom inclusion predicates are all third-party
code from the engine's point of view; a fault in any of them must degrade to
"this check failed" instead of aborting the evaluation.

Patterns supported:
  - Static default value (``with_fallback``)
  - Typed outcome of a single guarded call (``guarded_call`` → ``Outcome``)
"""
from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Any, Callable, TypeVar

from experiment_sdk.tier0_core.errors import CallbackError
from experiment_sdk.tier0_core.logging import get_logger

F = TypeVar("F", bound=Callable[..., Any])

logger = get_logger("experiment_sdk.fallback")


@dataclass(frozen=True)
class Outcome:
    """Ok(value) or Err(error) from a guarded call."""
    ok: bool
    value: Any = None
    error: Exception | None = None

    @classmethod
    def success(cls, value: Any) -> "Outcome":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, error: Exception) -> "Outcome":
        return cls(ok=False, error=error)

    def value_or(self, default: Any) -> Any:
        return self.value if self.ok else default


def guarded_call(
    fn: Callable[..., Any],
    *args: Any,
    event: str = "callback_failed",
    log_fields: dict[str, Any] | None = None,
    **kwargs: Any,
) -> Outcome:
    """
    Call *fn* and capture any exception as an ``Outcome.failure`` holding a
    CallbackError whose __cause__ is the original exception.

    Usage::

        outcome = guarded_call(definition.include, event="include.failed")
        if not outcome.value_or(False):
            ...
    """
    try:
        return Outcome.success(fn(*args, **kwargs))
    except Exception as exc:
        logger.warning(
            event,
            function=getattr(fn, "__qualname__", repr(fn)),
            error=str(exc),
            error_type=type(exc).__name__,
            **(log_fields or {}),
        )
        error = CallbackError(detail=f"{event}: {exc}")
        error.__cause__ = exc
        return Outcome.failure(error)


def with_fallback(
    default: Any,
    *,
    log_errors: bool = True,
    reraise: type[Exception] | tuple[type[Exception], ...] | None = None,
) -> Callable[[F], F]:
    """
    Decorator: on any exception, return *default* instead of raising.

    Args:
        default: Value to return when the wrapped function raises.
        log_errors: Whether to log the exception (default True).
        reraise: Exception type(s) that should still be raised (not caught).

    Usage::

        @with_fallback(default=False)
        def matches(condition: dict, attributes: dict) -> bool: ...
    """
    def decorator(fn: F) -> F:
        @functools.wraps(fn)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return fn(*args, **kwargs)
            except Exception as exc:
                if reraise and isinstance(exc, reraise):
                    raise
                if log_errors:
                    logger.warning(
                        "fallback_triggered",
                        function=fn.__qualname__,
                        error=str(exc),
                        error_type=type(exc).__name__,
                    )
                return default

        return wrapper  # type: ignore[return-value]

    return decorator


__all__ = ["Outcome", "guarded_call", "with_fallback"]
