"""
Sidekick Assistant — Plaid Finance.

Implements FinancePort on top of the plaid-python SDK. The SDK is
synchronous, so each call runs in a worker thread. Any missing
configuration or Plaid API error surfaces as CollaboratorUnavailable.

Run as a module to link a bank account and print the access token:

    python -m src.integrations.plaid_finance
"""

from __future__ import annotations

import asyncio
import logging
import time
from datetime import date, timedelta
from typing import Any

import plaid
from plaid.api import plaid_api
from plaid.model.accounts_balance_get_request import AccountsBalanceGetRequest
from plaid.model.country_code import CountryCode
from plaid.model.item_public_token_exchange_request import ItemPublicTokenExchangeRequest
from plaid.model.link_token_create_request import LinkTokenCreateRequest
from plaid.model.link_token_create_request_user import LinkTokenCreateRequestUser
from plaid.model.products import Products
from plaid.model.transactions_get_request import TransactionsGetRequest
from plaid.model.transactions_get_request_options import TransactionsGetRequestOptions

from src.data.models import AccountBalance, Transaction
from src.ports.collaborator import CollaboratorUnavailable

logger = logging.getLogger(__name__)

_ENVIRONMENTS = {
    "sandbox": plaid.Environment.Sandbox,
    "production": plaid.Environment.Production,
}

TRANSACTION_PAGE_SIZE = 100
LINK_CLIENT_NAME = "Sidekick Assistant"


def _build_client(client_id: str, secret: str, env: str) -> plaid_api.PlaidApi:
    configuration = plaid.Configuration(
        host=_ENVIRONMENTS.get(env.lower(), plaid.Environment.Sandbox),
        api_key={"clientId": client_id, "secret": secret},
    )
    return plaid_api.PlaidApi(plaid.ApiClient(configuration))


def to_transaction(raw: dict[str, Any]) -> Transaction:
    """Map a Plaid transaction dict onto the domain model."""
    categories = raw.get("category") or []
    return Transaction(
        id=raw["transaction_id"],
        amount=float(raw["amount"]),
        category=categories[0] if categories else "Uncategorized",
        merchant=raw.get("merchant_name") or raw.get("name") or "Unknown",
        date=str(raw.get("date", "")),
    )


def to_balance(raw: dict[str, Any]) -> AccountBalance:
    balances = raw.get("balances") or {}
    return AccountBalance(
        name=raw.get("name") or "Account",
        current_balance=float(balances.get("current") or 0.0),
    )


class PlaidFinance:
    """FinancePort backed by a single linked Plaid item."""

    def __init__(
        self,
        client_id: str,
        secret: str,
        access_token: str,
        env: str = "sandbox",
        client: plaid_api.PlaidApi | None = None,
    ) -> None:
        self._access_token = access_token
        self._client = client
        if self._client is None and client_id and secret:
            self._client = _build_client(client_id, secret, env)

    @classmethod
    def from_settings(cls) -> PlaidFinance:
        from src.config import settings

        return cls(
            client_id=settings.PLAID_CLIENT_ID,
            secret=settings.PLAID_SECRET,
            access_token=settings.PLAID_ACCESS_TOKEN,
            env=settings.PLAID_ENV,
        )

    def _require_api(self) -> plaid_api.PlaidApi:
        if self._client is None:
            raise CollaboratorUnavailable("Plaid credentials are not configured")
        return self._client

    def _require_client(self) -> plaid_api.PlaidApi:
        client = self._require_api()
        if not self._access_token:
            raise CollaboratorUnavailable("No bank account linked")
        return client

    # ------------------------------------------------------------------
    # Account linking
    # ------------------------------------------------------------------

    async def create_link_token(self, user_id: str) -> str:
        """Create a Plaid Link token for linking a bank account."""
        client = self._require_api()
        request = LinkTokenCreateRequest(
            user=LinkTokenCreateRequestUser(client_user_id=user_id),
            client_name=LINK_CLIENT_NAME,
            products=[Products("transactions"), Products("auth")],
            country_codes=[CountryCode("US")],
            language="en",
        )
        try:
            response = await asyncio.to_thread(client.link_token_create, request)
        except plaid.ApiException as exc:
            logger.error("Plaid link_token_create failed: %s", exc.body)
            raise CollaboratorUnavailable("Could not create link token") from exc
        return response.to_dict()["link_token"]

    async def exchange_public_token(self, public_token: str) -> str:
        """Trade a Link public token for an access token and start using it."""
        client = self._require_api()
        request = ItemPublicTokenExchangeRequest(public_token=public_token)
        try:
            response = await asyncio.to_thread(client.item_public_token_exchange, request)
        except plaid.ApiException as exc:
            logger.error("Plaid item_public_token_exchange failed: %s", exc.body)
            raise CollaboratorUnavailable("Could not exchange public token") from exc

        self._access_token = response.to_dict()["access_token"]
        logger.info("Plaid access token obtained")
        return self._access_token

    # ------------------------------------------------------------------
    # FinancePort
    # ------------------------------------------------------------------

    async def get_recent_transactions(self, days: int) -> list[Transaction]:
        client = self._require_client()
        end = date.today()
        request = TransactionsGetRequest(
            access_token=self._access_token,
            start_date=end - timedelta(days=days),
            end_date=end,
            options=TransactionsGetRequestOptions(count=TRANSACTION_PAGE_SIZE, offset=0),
        )
        try:
            response = await asyncio.to_thread(client.transactions_get, request)
        except plaid.ApiException as exc:
            logger.error("Plaid transactions_get failed: %s", exc.body)
            raise CollaboratorUnavailable("Could not fetch transactions") from exc

        transactions = [to_transaction(t) for t in response.to_dict().get("transactions", [])]
        logger.debug("Fetched %d transactions over %d days", len(transactions), days)
        return transactions

    async def get_account_balances(self) -> list[AccountBalance]:
        client = self._require_client()
        request = AccountsBalanceGetRequest(access_token=self._access_token)
        try:
            response = await asyncio.to_thread(client.accounts_balance_get, request)
        except plaid.ApiException as exc:
            logger.error("Plaid accounts_balance_get failed: %s", exc.body)
            raise CollaboratorUnavailable("Could not fetch balances") from exc

        return [to_balance(a) for a in response.to_dict().get("accounts", [])]


async def _link_account() -> None:
    finance = PlaidFinance.from_settings()
    link_token = await finance.create_link_token(f"user_{int(time.time())}")
    print("Link token created. Open Plaid Link (or the Plaid dashboard in sandbox) with:")
    print(f"  {link_token}\n")

    public_token = input("Paste the public token from Plaid Link (blank to skip): ").strip()
    if not public_token:
        print("No problem! Run this again once you have a public token.")
        return

    access_token = await finance.exchange_public_token(public_token)
    print("Success! Add this to your .env file:")
    print(f"PLAID_ACCESS_TOKEN={access_token}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    print("Plaid account setup")
    asyncio.run(_link_account())
