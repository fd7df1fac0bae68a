"""
Sidekick Assistant — Loop Guard.

In self-chat mode the assistant receives its own outgoing messages back as
"from me" events. The guard remembers the last few replies it sent and the
last transport message id it processed, so those echoes are dropped instead
of being handled as new commands.
"""

from __future__ import annotations

import logging
from collections import deque

from src.data.models import InboundMessage

logger = logging.getLogger(__name__)

RECENT_OUTPUTS_CAPACITY = 10


class RecentOutputs:
    """Bounded FIFO of reply texts; oldest entry evicted first."""

    def __init__(self, capacity: int = RECENT_OUTPUTS_CAPACITY) -> None:
        self._items: deque[str] = deque(maxlen=capacity)

    def record(self, text: str) -> None:
        self._items.append(text)

    def consume(self, text: str) -> bool:
        """Remove one matching entry. Returns True if one was found."""
        try:
            self._items.remove(text)
        except ValueError:
            return False
        return True

    def __contains__(self, text: object) -> bool:
        return text in self._items

    def __len__(self) -> int:
        return len(self._items)


class LoopGuard:
    """Decides whether an inbound message should be processed."""

    def __init__(
        self,
        self_chat_mode: bool = False,
        target_chat_id: str = "",
        capacity: int = RECENT_OUTPUTS_CAPACITY,
    ) -> None:
        self.self_chat_mode = self_chat_mode
        self.target_chat_id = target_chat_id
        self.recent_outputs = RecentOutputs(capacity)
        self.last_message_id: str | None = None

    def record_output(self, text: str) -> None:
        """Remember a reply that is about to be sent."""
        self.recent_outputs.record(text)

    def should_process(self, message: InboundMessage) -> bool:
        if self.target_chat_id and message.chat_id != self.target_chat_id:
            logger.debug("Ignoring message outside target chat: %s", message.chat_id)
            return False

        if not message.from_me:
            return True

        if not self.self_chat_mode:
            return False

        if message.id and message.id == self.last_message_id:
            logger.info("Skipping already processed message %s", message.id)
            return False

        if self.recent_outputs.consume(message.body):
            logger.debug("Dropping echo of our own reply")
            return False

        self.last_message_id = message.id
        return True
