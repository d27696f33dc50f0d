"""Notification sink implementations."""

from src.infrastructure.notifications.factory import get_notification_sinks
from src.infrastructure.notifications.logging_sink import LoggingNotificationSink
from src.infrastructure.notifications.webhook_sink import WebhookNotificationSink

__all__ = [
    "LoggingNotificationSink",
    "WebhookNotificationSink",
    "get_notification_sinks",
]
