"""
Tracker events for notification consumers.

The store publishes two kinds of event: an achievement unlocked, and a
health milestone reached. Consumers either subscribe a callback (called
synchronously, in publish order) or poll the pending queue.
"""
import logging
from collections import deque
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List

logger = logging.getLogger(__name__)

ACHIEVEMENT_UNLOCKED = "achievement_unlocked"
MILESTONE_REACHED = "milestone_reached"


@dataclass(frozen=True)
class TrackerEvent:
    kind: str  # ACHIEVEMENT_UNLOCKED or MILESTONE_REACHED
    key: str   # achievement id or milestone label
    occurred_at: datetime


Handler = Callable[[TrackerEvent], None]


class EventBus:
    """Fan-out to subscribers plus a pending queue for pollers."""

    def __init__(self, max_pending: int = 100) -> None:
        self._handlers: List[Handler] = []
        # oldest events are dropped if nobody polls
        self._pending = deque(maxlen=max_pending)

    def subscribe(self, handler: Handler) -> Callable[[], None]:
        """Register handler; returns a callable that unsubscribes it."""
        self._handlers.append(handler)

        def unsubscribe() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return unsubscribe

    def publish(self, event: TrackerEvent) -> None:
        self._pending.append(event)
        for handler in list(self._handlers):
            try:
                handler(event)
            except Exception:
                # one broken consumer must not block the others
                logger.exception("Event handler %r failed for %s", handler, event)

    def poll(self) -> List[TrackerEvent]:
        """Return and clear events published since the last poll."""
        events = list(self._pending)
        self._pending.clear()
        return events
