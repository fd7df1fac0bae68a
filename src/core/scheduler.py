"""
Sidekick Assistant — Periodic Jobs.

Proactive pushes that run on the SchedulerPort alongside user reminders:

    hourly          spending, budget and social media alerts
    09-21 every 2h  important email alert
    08:00           morning motivation
    12:00           midday check-in
    21:00           evening wind-down
    22:00           LLM daily summary (spending + activity)
    Sun 20:00       weekly activity summary
    02:00           purge activities older than 30 days
    00:00           reset social media counters

Each job is wrapped so a failure is logged and never stops other jobs.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Awaitable, Callable

from src.core.command_service import format_emails
from src.data.models import CronSpec
from src.ports.collaborator import CollaboratorUnavailable

if TYPE_CHECKING:
    from src.core.budget import BudgetTracker
    from src.core.dispatcher import NotificationDispatcher
    from src.core.personality import Personality
    from src.core.social_media import UsageTracker
    from src.core.spending import SpendingAnalyzer
    from src.data.activity_log import ActivityLog
    from src.ports.email_port import EmailPort
    from src.ports.scheduler_port import JobHandle, SchedulerPort

logger = logging.getLogger(__name__)

MORNING_PROMPT = (
    "Send a short, sassy morning motivation message to start the day strong. "
    "Keep it under 2 sentences."
)
MIDDAY_PROMPT = (
    "Send a quick midday check-in. Ask how their morning went and remind them "
    "to stay focused. Keep it brief and sassy."
)
EVENING_PROMPT = (
    "Remind them to start winding down, prep for tomorrow, and get good sleep. "
    "Be supportive but firm about self-care."
)
_DAILY_SUMMARY_PROMPT = """\
Generate a sassy, passionate daily summary based on this data:

Activity Today: {activity}
Spending: {spending}

Be honest and direct. Call out any lazy or wasteful behavior. If they did well, \
show pride. Keep it real and conversational."""


@dataclass
class Monitor:
    """Everything the periodic jobs read from or push to."""

    dispatcher: NotificationDispatcher
    personality: Personality
    spending: SpendingAnalyzer
    budget: BudgetTracker
    usage: UsageTracker
    activities: ActivityLog
    email: EmailPort
    _notified_emails: set[str] = field(default_factory=set)

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    async def check_spending_and_budget(self) -> None:
        logger.info("Running spending and budget check...")
        alerts: list[str] = []
        try:
            alerts += await self.spending.alert_messages(self.personality)
            alerts += await self.budget.alert_messages(self.personality)
        except CollaboratorUnavailable as exc:
            logger.info("Skipping finance alerts: %s", exc)

        for platform, hours in self.usage.over_limit():
            alerts.append(
                await self.personality.social_media_alert(platform, hours, self.usage.max_hours)
            )

        for alert in alerts:
            await self.dispatcher.send(f"🤖 {alert}")

    async def check_important_emails(self) -> None:
        logger.info("Checking important emails...")
        try:
            emails = await self.email.get_important_messages()
        except CollaboratorUnavailable as exc:
            logger.info("Skipping email check: %s", exc)
            return

        fresh = [e for e in emails if e.id not in self._notified_emails]
        if not fresh:
            logger.info("No important emails to report")
            return

        if await self.dispatcher.send(format_emails(fresh)):
            self._notified_emails.update(e.id for e in fresh)
            logger.info("Sent important emails notification (%d)", len(fresh))

    async def send_ping(self, prompt: str) -> None:
        message = await self.personality.generate(prompt)
        await self.dispatcher.send(f"🤖 {message}")

    async def send_daily_summary(self) -> None:
        logger.info("Generating daily summary...")
        try:
            spending = await self.spending.digest()
        except CollaboratorUnavailable:
            spending = "(unavailable)"
        summary = await self.personality.generate(
            _DAILY_SUMMARY_PROMPT.format(
                activity=self.activities.daily_summary(), spending=spending,
            ),
            max_tokens=400,
        )
        await self.dispatcher.send(summary)

    async def send_weekly_summary(self) -> None:
        logger.info("Generating weekly summary...")
        await self.dispatcher.send(self.activities.weekly_summary())

    async def clean_activities(self) -> None:
        self.activities.clean_old()

    async def reset_usage(self) -> None:
        self.usage.reset_daily()

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    def jobs(self) -> list[tuple[str, CronSpec, Callable[[], Awaitable[None]]]]:
        return [
            ("spending_check", CronSpec("0", "*"), self.check_spending_and_budget),
            ("email_check", CronSpec("0", "9-21/2"), self.check_important_emails),
            ("morning_motivation", CronSpec("0", "8"), lambda: self.send_ping(MORNING_PROMPT)),
            ("midday_checkin", CronSpec("0", "12"), lambda: self.send_ping(MIDDAY_PROMPT)),
            ("evening_winddown", CronSpec("0", "21"), lambda: self.send_ping(EVENING_PROMPT)),
            ("daily_summary", CronSpec("0", "22"), self.send_daily_summary),
            ("weekly_summary", CronSpec("0", "20", "sun"), self.send_weekly_summary),
            ("activity_cleanup", CronSpec("0", "2"), self.clean_activities),
            ("usage_reset", CronSpec("0", "0"), self.reset_usage),
        ]


def _guarded(name: str, job: Callable[[], Awaitable[None]]) -> Callable[[], Awaitable[None]]:
    async def _run() -> None:
        try:
            await job()
        except Exception as exc:
            logger.error("Scheduled job %s failed: %s", name, exc)

    return _run


def register_monitoring(monitor: Monitor, scheduler: SchedulerPort) -> list[JobHandle]:
    """Schedule every periodic job. Returns the handles."""
    handles = []
    for name, trigger, job in monitor.jobs():
        handles.append(scheduler.schedule_recurring(trigger, _guarded(name, job), name=name))
        logger.info("Scheduled %s (%s)", name, trigger.expression)
    return handles
