"""
Sidekick Assistant — WhatsApp Webhook.

WhatsApp is the only user interface. Meta delivers every inbound message
(and, in self-chat mode, echoes of messages sent from the user's own
phone) to POST /webhook; replies and proactive pushes go back out
through the Cloud API.

Security-first: payloads with a bad signature are rejected, and messages
from anyone but the authorized number are silently ignored.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import time
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from fastapi import BackgroundTasks, FastAPI, Request, Response
from fastapi.responses import PlainTextResponse

from src.config import settings
from src.core.budget import BudgetTracker
from src.core.command_service import CommandService
from src.core.dispatcher import NotificationDispatcher
from src.core.loop_guard import LoopGuard
from src.core.message_processor import MessageProcessor
from src.core.personality import Personality
from src.core.reminders import ReminderScheduler, ReminderStore
from src.core.scheduler import Monitor, register_monitoring
from src.core.social_media import UsageTracker
from src.core.spending import SpendingAnalyzer
from src.data.activity_log import ActivityLog
from src.data.models import InboundMessage

if TYPE_CHECKING:
    from src.core.personality import CompleteFn
    from src.ports.email_port import EmailPort
    from src.ports.finance_port import FinancePort
    from src.ports.notification_port import MessagingPort
    from src.ports.scheduler_port import JobHandle, SchedulerPort

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Payload parsing
# ---------------------------------------------------------------------------


def _text_message(raw: dict[str, Any], to: str, from_me: bool) -> InboundMessage | None:
    if raw.get("type") != "text":
        return None
    return InboundMessage(
        sender=raw.get("from", ""),
        to=to,
        body=raw.get("text", {}).get("body", ""),
        from_me=from_me,
        id=raw.get("id", ""),
    )


def extract_messages(payload: dict[str, Any]) -> list[InboundMessage]:
    """Pull text messages out of a Cloud API webhook payload.

    `messages` are authored by the other party; `message_echoes` are copies
    of what the business number itself sent, i.e. the user's own messages
    in self-chat mode.
    """
    messages: list[InboundMessage] = []
    for entry in payload.get("entry", []):
        for change in entry.get("changes", []):
            value = change.get("value", {})
            own_number = value.get("metadata", {}).get("display_phone_number", "")

            for raw in value.get("messages", []):
                msg = _text_message(raw, to=own_number, from_me=False)
                if msg:
                    messages.append(msg)

            for raw in value.get("message_echoes", []):
                msg = _text_message(raw, to=raw.get("to", ""), from_me=True)
                if msg:
                    messages.append(msg)
    return messages


def verify_signature(payload_body: bytes, signature_header: str, app_secret: str) -> bool:
    """Check Meta's X-Hub-Signature-256 header. Skipped when no secret is set."""
    if not app_secret:
        logger.warning("WHATSAPP_APP_SECRET not set, skipping signature verification")
        return True
    if not signature_header:
        return False
    expected = "sha256=" + hmac.new(
        app_secret.encode("utf-8"), payload_body, hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, signature_header)


# ---------------------------------------------------------------------------
# Wiring
# ---------------------------------------------------------------------------


@dataclass
class Assistant:
    """All long-lived state, built once per process."""

    processor: MessageProcessor
    reminders: ReminderScheduler
    monitor: Monitor
    scheduler: SchedulerPort
    started_at: float


def build_assistant(
    transport: MessagingPort | None = None,
    scheduler: SchedulerPort | None = None,
    finance: FinancePort | None = None,
    email: EmailPort | None = None,
    complete: CompleteFn | None = None,
    activities: ActivityLog | None = None,
) -> Assistant:
    """Construct every component, defaulting to the production adapters."""
    if transport is None:
        from src.adapters.whatsapp_notifier import WhatsAppNotifier
        transport = WhatsAppNotifier(
            settings.WHATSAPP_ACCESS_TOKEN,
            settings.WHATSAPP_PHONE_NUMBER_ID,
            settings.WHATSAPP_API_VERSION,
        )
    if scheduler is None:
        from src.adapters.apscheduler_clock import APSchedulerClock
        scheduler = APSchedulerClock(settings.TIMEZONE)
    if complete is None:
        from src.core.llm import complete
    if finance is None:
        from src.integrations.plaid_finance import PlaidFinance
        finance = PlaidFinance.from_settings()
    if email is None:
        from src.integrations.gmail_service import GmailService
        email = GmailService(complete)
    if activities is None:
        activities = ActivityLog()

    loop_guard = LoopGuard(
        self_chat_mode=settings.SELF_CHAT_MODE,
        target_chat_id=settings.TARGET_CHAT_ID,
    )
    dispatcher = NotificationDispatcher(transport, settings.AUTHORIZED_USER_NUMBER, loop_guard)
    personality = Personality(complete, style_path=settings.STYLE_PATH)
    reminders = ReminderScheduler(ReminderStore(), dispatcher)
    spending = SpendingAnalyzer(
        finance,
        alert_threshold=settings.SPENDING_ALERT_THRESHOLD,
        unnecessary_categories=settings.UNNECESSARY_SPENDING_CATEGORIES,
    )
    budget = BudgetTracker(finance)
    usage = UsageTracker(settings.MAX_SOCIAL_MEDIA_HOURS_PER_DAY)

    commands = CommandService(
        personality=personality,
        reminders=reminders,
        budget=budget,
        spending=spending,
        usage=usage,
        activities=activities,
        finance=finance,
        email=email,
    )
    processor = MessageProcessor(
        commands, dispatcher, loop_guard, settings.AUTHORIZED_USER_NUMBER,
    )
    monitor = Monitor(
        dispatcher=dispatcher,
        personality=personality,
        spending=spending,
        budget=budget,
        usage=usage,
        activities=activities,
        email=email,
    )
    return Assistant(
        processor=processor,
        reminders=reminders,
        monitor=monitor,
        scheduler=scheduler,
        started_at=time.monotonic(),
    )


def build_app(assistant: Assistant | None = None) -> FastAPI:
    """Build the FastAPI application around an Assistant."""
    if assistant is None:
        assistant = build_assistant()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        scheduler = assistant.scheduler
        scheduler.start()
        bound = assistant.reminders.attach(scheduler)
        jobs: list[JobHandle] = register_monitoring(assistant.monitor, scheduler)
        logger.info("Scheduler running: %d reminders, %d periodic jobs", bound, len(jobs))
        try:
            yield
        finally:
            assistant.reminders.detach()
            scheduler.shutdown()
            logger.info("Sidekick Assistant stopped")

    app = FastAPI(title="Sidekick Assistant", lifespan=lifespan)
    app.state.assistant = assistant

    @app.get("/webhook")
    async def verify_webhook(request: Request):
        """Handle Meta webhook verification challenge."""
        params = request.query_params
        if (
            params.get("hub.mode") == "subscribe"
            and settings.WHATSAPP_VERIFY_TOKEN
            and params.get("hub.verify_token") == settings.WHATSAPP_VERIFY_TOKEN
        ):
            logger.info("Webhook verified successfully")
            return Response(content=params.get("hub.challenge", ""), media_type="text/plain")

        logger.warning("Webhook verification failed: invalid token")
        return Response(content="Forbidden", status_code=403)

    @app.post("/webhook")
    async def receive_message(request: Request, background_tasks: BackgroundTasks):
        """Queue every text message in the payload for processing."""
        body = await request.body()
        signature = request.headers.get("X-Hub-Signature-256", "")
        if not verify_signature(body, signature, settings.WHATSAPP_APP_SECRET):
            logger.warning("Invalid webhook signature, rejecting request")
            return Response(status_code=403, content="Invalid signature")

        payload = await request.json()
        for message in extract_messages(payload):
            background_tasks.add_task(assistant.processor.process, message)
        return {"status": "ok"}

    @app.get("/")
    async def root():
        return PlainTextResponse("Sidekick Assistant is running! 🤖")

    @app.get("/health")
    async def health():
        return {"status": "ok", "uptime": time.monotonic() - assistant.started_at}

    return app


def main() -> None:
    """Entry point: build the app and serve it with uvicorn."""
    import uvicorn

    logger.info("Starting Sidekick Assistant on %s:%d...", settings.HOST, settings.PORT)
    uvicorn.run(build_app(), host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    main()
