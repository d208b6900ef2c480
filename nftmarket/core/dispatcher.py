"""EventDispatcher — fans committed marketplace events out to subscribers.

Events are published only after an operation has fully committed, so a
subscriber can never abort or partially undo it.  Subscriber failures are
logged and do not prevent delivery to the remaining subscribers.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from nftmarket.models.events import EventKind, MarketEventBase

logger = logging.getLogger(__name__)

EventHandler = Callable[[MarketEventBase], None]


class EventDispatcher:
    """Routes events to every matching subscriber in subscription order.

    Usage
    -----
    >>> dispatcher = EventDispatcher()
    >>> seen = []
    >>> dispatcher.subscribe(seen.append)
    >>> dispatcher.subscribe(print, kind=EventKind.ITEM_BOUGHT)
    """

    def __init__(self) -> None:
        self._subscribers: list[tuple[EventKind | None, EventHandler]] = []

    def subscribe(self, handler: EventHandler, kind: EventKind | None = None) -> None:
        """Register *handler* for events of *kind* (all kinds when None).

        Duplicate registration of the same (kind, handler) pair is ignored.
        """
        if (kind, handler) not in self._subscribers:
            self._subscribers.append((kind, handler))

    def unsubscribe(self, handler: EventHandler, kind: EventKind | None = None) -> None:
        """Remove a previously registered subscription."""
        try:
            self._subscribers.remove((kind, handler))
        except ValueError:
            pass

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def publish(self, event: MarketEventBase) -> int:
        """Deliver *event* to all matching subscribers.

        Returns the number of subscribers that accepted it.
        """
        delivered = 0
        for kind, handler in list(self._subscribers):
            if kind is not None and kind != event.event_kind:
                continue
            try:
                handler(event)
                delivered += 1
            except Exception as exc:  # noqa: BLE001
                logger.error(
                    "Subscriber %r failed for %s %s: %s",
                    handler,
                    event.event_kind.value,
                    event.event_id,
                    exc,
                )
        if not delivered:
            logger.debug("No subscriber accepted %s %s.", event.event_kind.value, event.event_id)
        return delivered
