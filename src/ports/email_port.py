"""Email port — abstract interface for the important-mail feed."""

from __future__ import annotations

from typing import Protocol

from src.data.models import EmailSummary


class EmailPort(Protocol):
    """Abstract email interface used by core modules.

    Raises CollaboratorUnavailable when the mailbox is not connected.
    """

    async def get_important_messages(self) -> list[EmailSummary]: ...
