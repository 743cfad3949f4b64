"""
experiment_sdk.tier3_platform.notifications
─────────────────────────────────────────────
In-process subscriber notification. Hosts subscribe to learn when an
evaluation changes an observable assignment (new key, or a different
variation / inclusion for a known key) and to re-render UI.

Subscribers are held in an explicit observer list. ``subscribe()`` hands back
an opaque token; passing that token to ``unsubscribe()`` removes exactly that
registration, even if the same callable was subscribed twice.
"""
from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Any, Callable

from experiment_sdk.tier1_runtime.schemas import ExperimentDefinition, ExperimentResult
from experiment_sdk.tier2_reliability.fallback import guarded_call

Subscriber = Callable[[ExperimentDefinition, ExperimentResult], Any]

_token_ids = itertools.count(1)


@dataclass(frozen=True)
class SubscriptionToken:
    id: int = field(default_factory=lambda: next(_token_ids))


class SubscriberList:
    def __init__(self) -> None:
        self._subscribers: dict[SubscriptionToken, Subscriber] = {}

    def subscribe(self, callback: Subscriber) -> SubscriptionToken:
        token = SubscriptionToken()
        self._subscribers[token] = callback
        return token

    def unsubscribe(self, token: SubscriptionToken) -> bool:
        """Returns False if the token was unknown or already removed."""
        return self._subscribers.pop(token, None) is not None

    def notify(self, experiment: ExperimentDefinition, result: ExperimentResult) -> int:
        """
        Invoke every subscriber synchronously. Failures are logged and
        skipped. Returns how many subscribers completed.
        """
        delivered = 0
        # Snapshot so a subscriber may unsubscribe itself mid-notify
        for callback in list(self._subscribers.values()):
            outcome = guarded_call(
                callback,
                experiment,
                result,
                event="subscriber.failed",
                log_fields={"experiment": experiment.key},
            )
            if outcome.ok:
                delivered += 1
        return delivered

    def clear(self) -> None:
        self._subscribers.clear()

    def __len__(self) -> int:
        return len(self._subscribers)


__all__ = ["Subscriber", "SubscriptionToken", "SubscriberList"]
