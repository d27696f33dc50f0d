"""Notification sink that writes events to the structured log."""

from src.config import get_logger
from src.core.entities.events import NotificationEvent
from src.core.interfaces.notifications import INotificationSink

logger = get_logger(__name__)


class LoggingNotificationSink(INotificationSink):
    """Logs every event at INFO under the event's type."""

    async def publish(self, event: NotificationEvent) -> None:
        payload = event.model_dump(mode="json", exclude={"event_type"})
        logger.info("notification", event_type=event.event_type, **payload)
