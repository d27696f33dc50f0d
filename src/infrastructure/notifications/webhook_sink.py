"""
Webhook notification sink.

POSTs each event as JSON to a configured URL. Failures are logged and
dropped; there is no retry queue.
"""

import httpx

from src.config import get_logger
from src.core.entities.events import NotificationEvent
from src.core.interfaces.notifications import INotificationSink

logger = get_logger(__name__)


class WebhookNotificationSink(INotificationSink):
    def __init__(self, url: str, timeout: float = 5.0, client: httpx.AsyncClient | None = None):
        self.url = url
        self.timeout = timeout
        self._client = client

    async def publish(self, event: NotificationEvent) -> None:
        payload = event.model_dump(mode="json")
        try:
            if self._client is not None:
                response = await self._client.post(self.url, json=payload, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(self.url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(
                "webhook_delivery_failed",
                url=self.url,
                event_type=event.event_type,
                error=str(e),
            )
            return

        if response.status_code >= 400:
            logger.warning(
                "webhook_rejected",
                url=self.url,
                event_type=event.event_type,
                status_code=response.status_code,
                body=response.text[:200],
            )
            return

        logger.debug("webhook_delivered", url=self.url, event_type=event.event_type)
