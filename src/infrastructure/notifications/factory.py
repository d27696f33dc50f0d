"""
Notification sink factory.

Builds the sink list from configuration.
"""

from src.config import get_logger, get_settings
from src.core.interfaces.notifications import INotificationSink
from src.infrastructure.notifications.logging_sink import LoggingNotificationSink
from src.infrastructure.notifications.webhook_sink import WebhookNotificationSink

logger = get_logger(__name__)


def get_notification_sinks() -> list[INotificationSink]:
    """
    Sinks enabled by settings.

    The logging sink is always present; the webhook sink is added when
    NOTIFY_WEBHOOK_URL is set.
    """
    settings = get_settings().notifications
    sinks: list[INotificationSink] = [LoggingNotificationSink()]

    if settings.webhook_url:
        sinks.append(WebhookNotificationSink(settings.webhook_url, timeout=settings.timeout))

    logger.info(
        "notification_sinks_configured",
        sinks=[type(s).__name__ for s in sinks],
        enabled=settings.enabled,
    )
    return sinks
