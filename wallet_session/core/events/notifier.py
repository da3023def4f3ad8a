"""
Change Notifier

Process-wide publish/subscribe bus for session change events.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from .models import ChangeEvent, ChangeHandler

logger = logging.getLogger(__name__)


# Singleton instance
_notifier_instance: Optional["ChangeNotifier"] = None


def get_change_notifier() -> "ChangeNotifier":
    """Get the singleton ChangeNotifier instance."""
    global _notifier_instance
    if _notifier_instance is None:
        _notifier_instance = ChangeNotifier()
    return _notifier_instance


class Subscription:
    """Handle returned by ``ChangeNotifier.subscribe``."""

    def __init__(self, notifier: "ChangeNotifier", handler: ChangeHandler):
        self._notifier = notifier
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        self._notifier.unsubscribe(self)

    def __repr__(self) -> str:
        state = "active" if self.active else "inactive"
        return f"<Subscription {getattr(self.handler, '__qualname__', self.handler)!r} {state}>"


class ChangeNotifier:
    """
    Synchronous event bus.

    Handlers run in registration order on the publisher's call stack. A
    failing handler is logged and skipped; it never affects the publisher or
    the remaining handlers.
    """

    def __init__(self):
        self._subscriptions: List[Subscription] = []

    def subscribe(self, handler: ChangeHandler) -> Subscription:
        """Register a handler for all change events."""
        subscription = Subscription(self, handler)
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        """Remove a subscription. Unknown or already removed handles are ignored."""
        subscription.active = False
        self._subscriptions = [s for s in self._subscriptions if s is not subscription]

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    def publish(self, event: ChangeEvent) -> None:
        """Deliver an event to every subscribed handler."""
        logger.debug("Publishing %s", event.type.value)

        # Snapshot so handlers added during dispatch wait for the next event
        for subscription in list(self._subscriptions):
            if not subscription.active:
                continue
            try:
                subscription.handler(event)
            except Exception:
                logger.exception(
                    "Change handler %r failed on %s", subscription, event.type.value
                )

    def clear(self) -> None:
        for subscription in self._subscriptions:
            subscription.active = False
        self._subscriptions = []
