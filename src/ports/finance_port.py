"""Finance port — abstract interface for bank data.

Implementations raise CollaboratorUnavailable when no account is linked
or the provider call fails.
"""

from __future__ import annotations

from typing import Protocol

from src.data.models import AccountBalance, Transaction


class FinancePort(Protocol):
    """Abstract finance interface used by core modules."""

    async def get_recent_transactions(self, days: int) -> list[Transaction]: ...

    async def get_account_balances(self) -> list[AccountBalance]: ...
