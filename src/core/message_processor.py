"""
Sidekick Assistant — Message Processor.

The single top-level boundary for inbound messages:

    inbound -> authorization / loop guard -> command service -> dispatcher

Any exception raised while handling a command becomes an apologetic reply,
so a bad message can never take the process down.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from src.core.command_service import CommandService
    from src.core.dispatcher import NotificationDispatcher
    from src.core.loop_guard import LoopGuard
    from src.data.models import InboundMessage

logger = logging.getLogger(__name__)

APOLOGY = "Ugh, I'm having technical issues. Give me a sec..."


class MessageProcessor:
    """Filters, handles and answers inbound messages."""

    def __init__(
        self,
        commands: CommandService,
        dispatcher: NotificationDispatcher,
        loop_guard: LoopGuard,
        authorized_number: str,
    ) -> None:
        self._commands = commands
        self._dispatcher = dispatcher
        self._loop_guard = loop_guard
        self._authorized_number = authorized_number

    def _is_authorized(self, message: InboundMessage) -> bool:
        if message.from_me:
            return True
        if not self._authorized_number:
            logger.warning("No authorized user configured")
            return False
        if message.sender != self._authorized_number:
            logger.warning("Ignoring message from unauthorized number: %s", message.sender)
            return False
        return True

    async def process(self, message: InboundMessage) -> str | None:
        """Handle one inbound message. Returns the reply sent, if any."""
        if not self._is_authorized(message):
            return None
        if not self._loop_guard.should_process(message):
            return None

        body = message.body.strip()
        if not body:
            return None
        logger.info("Received: %r", body[:100])

        self._commands.personality.remember_user_message(body)
        try:
            reply = await self._commands.handle(body)
        except Exception:
            logger.exception("Error handling message")
            reply = APOLOGY

        if reply:
            await self._dispatcher.send(reply)
            logger.info("Sent: %r", reply[:50])
        return reply
