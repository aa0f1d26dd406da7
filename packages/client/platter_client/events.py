"""
Change notification for the local store.

Listeners (badge counters, cart views) subscribe by event name and are
called after every local mutation, so nothing has to poll the store.
"""

import logging
from collections import defaultdict
from collections.abc import Callable

logger = logging.getLogger(__name__)

CART_UPDATED = "cartUpdated"
FAVORITES_UPDATED = "favoritesUpdated"

Handler = Callable[[str], None]


class EventBus:
    """
    Minimal synchronous publish/subscribe channel.

    Usage:
        bus = EventBus()
        bus.subscribe(CART_UPDATED, lambda event: badge.refresh())
        bus.emit(CART_UPDATED)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = defaultdict(list)

    def subscribe(self, event: str, handler: Handler) -> Callable[[], None]:
        """
        Register a handler for an event.

        Returns:
            A callable that removes the subscription.
        """
        self._handlers[event].append(handler)
        return lambda: self.unsubscribe(event, handler)

    def unsubscribe(self, event: str, handler: Handler) -> None:
        """Remove a handler. Unknown handlers are ignored."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def emit(self, event: str) -> None:
        """
        Call every handler registered for the event.

        A failing handler is logged and does not prevent the others
        from running.
        """
        for handler in list(self._handlers.get(event, [])):
            try:
                handler(event)
            except Exception:
                logger.exception("Handler for %s failed", event)
