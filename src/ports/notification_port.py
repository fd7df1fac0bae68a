"""Messaging port — abstract interface for sending messages to a chat.

Core modules depend on this protocol, never on a specific messaging provider.
"""

from __future__ import annotations

from typing import Protocol


class MessagingPort(Protocol):
    """Abstract messaging transport used by core modules."""

    async def send_message(self, chat_id: str, text: str) -> None: ...
