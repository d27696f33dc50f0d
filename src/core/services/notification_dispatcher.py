"""
Fire-and-forget delivery of notification events.

Events are dispatched only after the state change they describe has been
committed. Delivery runs in background tasks; a failing sink is logged
and never affects the caller.
"""

import asyncio

from src.config import get_logger
from src.core.entities.events import NotificationEvent
from src.core.interfaces.notifications import INotificationSink

logger = get_logger(__name__)


class NotificationDispatcher:
    """Fans events out to sinks without blocking the caller."""

    def __init__(self, sinks: list[INotificationSink] | None = None, enabled: bool = True):
        self._sinks = list(sinks or [])
        self._enabled = enabled
        self._pending: set[asyncio.Task] = set()

    @property
    def sinks(self) -> list[INotificationSink]:
        return list(self._sinks)

    def add_sink(self, sink: INotificationSink) -> None:
        self._sinks.append(sink)

    def dispatch(self, event: NotificationEvent) -> None:
        """Schedule delivery of an event to every sink."""
        if not self._enabled or not self._sinks:
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("notification_dropped_no_loop", event_type=event.event_type)
            return

        for sink in self._sinks:
            task = loop.create_task(self._deliver(sink, event))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

    async def _deliver(self, sink: INotificationSink, event: NotificationEvent) -> None:
        try:
            await sink.publish(event)
        except Exception as e:
            logger.warning(
                "notification_delivery_failed",
                sink=sink.__class__.__name__,
                event_type=event.event_type,
                error=str(e),
            )

    async def drain(self) -> None:
        """Wait for in-flight deliveries (shutdown and tests)."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
