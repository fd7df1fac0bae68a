"""WhatsApp notification adapter: implements MessagingPort.

Posts text messages through the WhatsApp Cloud API (Graph API) using an
httpx.AsyncClient.
"""

from __future__ import annotations

import logging

import httpx

logger = logging.getLogger(__name__)

GRAPH_API_URL = "https://graph.facebook.com"


class WhatsAppNotifier:
    """WhatsApp Cloud API implementation of MessagingPort."""

    def __init__(
        self,
        access_token: str,
        phone_number_id: str,
        api_version: str = "v21.0",
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._url = f"{GRAPH_API_URL}/{api_version}/{phone_number_id}/messages"
        self._headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }
        self._client = client

    async def send_message(self, chat_id: str, text: str) -> None:
        payload = {
            "messaging_product": "whatsapp",
            "to": chat_id,
            "type": "text",
            "text": {"body": text},
        }
        if self._client is not None:
            resp = await self._client.post(self._url, json=payload, headers=self._headers)
        else:
            async with httpx.AsyncClient(timeout=10.0) as client:
                resp = await client.post(self._url, json=payload, headers=self._headers)
        resp.raise_for_status()
        logger.debug("WhatsApp message sent to %s", chat_id)
