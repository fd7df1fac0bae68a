"""
Sidekick Assistant — Gmail.

Implements EmailPort: unread mail from the last 24 hours, filtered down
to what an LLM judges as truly important. Authorization is a one-off
interactive step (run this module directly); the bot itself only ever
loads and refreshes the saved token.
"""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path
from typing import Awaitable, Callable

from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError

from src.data.models import EmailSummary
from src.ports.collaborator import CollaboratorUnavailable

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/gmail.readonly"]
MAX_RESULTS = 50

CompleteFn = Callable[[str, str], Awaitable[str]]

IMPORTANCE_SYSTEM = "You triage an inbox. Answer with a single word: YES or NO."
_IMPORTANCE_PROMPT = """\
Analyze this email and determine if it's TRULY IMPORTANT and needs immediate attention.

From: {sender}
Subject: {subject}
Preview: {snippet}

Criteria for IMPORTANT emails:
- From a real person (not automated/marketing)
- Requires a response or action
- Time-sensitive or urgent
- Work-related deadlines or meetings
- Personal messages from people you know
- Bills, payments, or financial matters

NOT important:
- Newsletters, promotions, marketing
- Social media notifications
- Automated confirmations (order shipped, etc.)
- Generic updates or announcements

Respond with ONLY "YES" if it's important, or "NO" if it's not."""


def get_gmail_service(credentials_path: str, token_path: str):
    """Build a Gmail API v1 service from the saved token.

    Raises CollaboratorUnavailable when the mailbox has not been authorized.
    """
    creds_file = Path(credentials_path)
    token_file = Path(token_path)
    if not creds_file.exists():
        raise CollaboratorUnavailable(f"Gmail credentials not found at {creds_file}")
    if not token_file.exists():
        raise CollaboratorUnavailable(
            "Gmail token not found. Run: python -m src.integrations.gmail_service"
        )

    creds = Credentials.from_authorized_user_file(str(token_file), SCOPES)
    if creds.expired and creds.refresh_token:
        try:
            creds.refresh(Request())
        except Exception as exc:
            raise CollaboratorUnavailable(f"Gmail token refresh failed: {exc}") from exc
        token_file.write_text(creds.to_json())
        logger.info("Gmail token refreshed")

    return build("gmail", "v1", credentials=creds)


def _header(headers: list[dict], name: str, default: str) -> str:
    for h in headers:
        if h.get("name") == name:
            return h.get("value", default)
    return default


def fetch_unread(service, since_epoch: int) -> list[EmailSummary]:
    """Unread messages received after `since_epoch` (blocking)."""
    users = service.users()
    listing = users.messages().list(
        userId="me", q=f"is:unread after:{since_epoch}", maxResults=MAX_RESULTS,
    ).execute()

    emails = []
    for ref in listing.get("messages", []):
        msg = users.messages().get(
            userId="me", id=ref["id"], format="metadata",
            metadataHeaders=["From", "Subject"],
        ).execute()
        headers = msg.get("payload", {}).get("headers", [])
        emails.append(EmailSummary(
            id=ref["id"],
            sender=_header(headers, "From", "Unknown"),
            subject=_header(headers, "Subject", "(No Subject)"),
            snippet=msg.get("snippet", ""),
        ))
    return emails


class GmailService:
    """EmailPort backed by the Gmail API and an LLM importance filter."""

    def __init__(
        self,
        complete: CompleteFn,
        credentials_path: str | None = None,
        token_path: str | None = None,
    ) -> None:
        if credentials_path is None or token_path is None:
            from src.config import settings
            credentials_path = credentials_path or settings.GMAIL_CREDENTIALS_PATH
            token_path = token_path or settings.GMAIL_TOKEN_PATH

        self._complete = complete
        self._credentials_path = credentials_path
        self._token_path = token_path
        self._service = None

    def _get_service(self):
        if self._service is None:
            self._service = get_gmail_service(self._credentials_path, self._token_path)
            logger.info("Gmail connected")
        return self._service

    async def is_important(self, email: EmailSummary) -> bool:
        prompt = _IMPORTANCE_PROMPT.format(
            sender=email.sender, subject=email.subject, snippet=email.snippet,
        )
        try:
            answer = await self._complete(IMPORTANCE_SYSTEM, prompt)
        except Exception as exc:
            logger.warning("Importance check failed for %s: %s", email.id, exc)
            return False
        return "YES" in answer.strip().upper()

    async def get_important_messages(self) -> list[EmailSummary]:
        service = await asyncio.to_thread(self._get_service)
        since = int(time.time()) - 24 * 60 * 60
        try:
            emails = await asyncio.to_thread(fetch_unread, service, since)
        except HttpError as exc:
            raise CollaboratorUnavailable(f"Gmail request failed: {exc}") from exc

        important = [e for e in emails if await self.is_important(e)]
        logger.info("Found %d important of %d unread emails", len(important), len(emails))
        return important


def authorize(credentials_path: str, token_path: str) -> Credentials:
    """Run the interactive OAuth2 consent flow and persist the token."""
    flow = InstalledAppFlow.from_client_secrets_file(credentials_path, SCOPES)
    creds = flow.run_local_server(port=0)
    token_file = Path(token_path)
    token_file.parent.mkdir(parents=True, exist_ok=True)
    token_file.write_text(creds.to_json())
    logger.info("Gmail token saved to %s", token_file)
    return creds


if __name__ == "__main__":
    from src.config import settings

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
    print("Running Gmail authorization flow...")
    authorize(settings.GMAIL_CREDENTIALS_PATH, settings.GMAIL_TOKEN_PATH)
    svc = get_gmail_service(settings.GMAIL_CREDENTIALS_PATH, settings.GMAIL_TOKEN_PATH)
    profile = svc.users().getProfile(userId="me").execute()
    print(f"Auth successful! Connected as {profile.get('emailAddress')}.")
