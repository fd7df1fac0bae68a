"""
Sidekick Assistant — Notification Dispatcher.

Every outgoing message (command replies, reminders, budget/email alerts,
scheduled pings) goes to the single authorized chat through here.
Delivery is best-effort: one attempt, failures are logged, never raised.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.loop_guard import LoopGuard
    from src.ports.notification_port import MessagingPort

logger = logging.getLogger(__name__)


class NotificationDispatcher:
    """Sends text to the configured recipient via a MessagingPort."""

    def __init__(
        self,
        transport: MessagingPort,
        recipient: str,
        loop_guard: LoopGuard | None = None,
    ) -> None:
        self._transport = transport
        self._recipient = recipient
        self._loop_guard = loop_guard

    async def send(self, text: str) -> bool:
        if not self._recipient:
            logger.error("No authorized user number configured")
            return False

        if self._loop_guard is not None:
            self._loop_guard.record_output(text)

        try:
            await self._transport.send_message(self._recipient, text)
        except Exception as exc:
            logger.error("Error sending message: %s", exc)
            return False
        return True
