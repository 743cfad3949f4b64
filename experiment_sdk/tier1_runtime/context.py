"""
experiment_sdk.tier1_runtime.context
──────────────────────────────────────
Evaluation context — who the user is, which overrides are active, and which
hooks fire on exposure. One Context belongs to one engine.

The ambient request URL uses Python contextvars for async-safe,
framework-agnostic storage: web middleware calls ``set_request_url()`` once
per request and URL targeting picks it up without the host threading the URL
through every Context.
"""
from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable

from experiment_sdk.tier0_core.config import get_config
from experiment_sdk.tier0_core.logging import bind_context

TrackingCallback = Callable[[Any, Any], Any]
Renderer = Callable[[], Any]


# ── Domain model ─────────────────────────────────────────────────────────────

@dataclass
class Context:
    """All host-supplied state consulted by an evaluation."""
    enabled: bool = field(default_factory=lambda: get_config().enabled)
    qa_mode: bool = field(default_factory=lambda: get_config().qa_mode)
    attributes: dict[str, Any] = field(default_factory=dict)
    # Identity fields (id, anon_id, company_id, ...). Consulted for the hash
    # value when the hash attribute is not among ``attributes``.
    user: dict[str, Any] = field(default_factory=dict)
    groups: dict[str, bool] = field(default_factory=dict)
    url: str | None = None
    forced_variations: dict[str, int] = field(default_factory=dict)
    overrides: dict[str, Any] = field(default_factory=dict)
    tracking_callback: TrackingCallback | None = None
    renderer: Renderer | None = None

    def resolve_url(self) -> str | None:
        """Context URL, else the current request's URL, else the configured default."""
        return self.url or get_request_url() or get_config().url

    def hash_value(self, attribute: str) -> Any:
        attributes = self.attributes or {}
        if attribute in attributes:
            return attributes[attribute]
        return (self.user or {}).get(attribute)


# ── ContextVar storage ────────────────────────────────────────────────────────

_request_url: ContextVar[str | None] = ContextVar(
    "experiment_sdk_request_url",
    default=None,
)


# ── Public API ────────────────────────────────────────────────────────────────

def get_request_url() -> str | None:
    """Return the URL of the request being served in this async scope."""
    return _request_url.get()


def set_request_url(url: str | None) -> None:
    """Set the ambient request URL for the current async scope."""
    _request_url.set(url)
    # Sync with structlog contextvars so evaluation logs carry the URL
    bind_context(request_url=url)


__sdk_export__ = {
    "surface": "public",
    "exports": ["Context", "get_request_url", "set_request_url"],
    "description": "Evaluation context plus ambient request URL via contextvars",
    "tier": "tier1_runtime",
    "module": "context",
}
