"""Abstract interface for notification delivery."""

from abc import ABC, abstractmethod

from src.core.entities.events import NotificationEvent


class INotificationSink(ABC):
    """
    Receives events after a state change has been committed.

    Delivery is best-effort: implementations must not raise.
    """

    @abstractmethod
    async def publish(self, event: NotificationEvent) -> None:
        """Deliver one event."""
        pass
