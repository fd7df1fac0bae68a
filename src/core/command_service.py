"""
Sidekick Assistant — Command Service.

One handler per Intent. Each handler owns its mutation (budget value,
reminder store, activity log, usage counters) and returns the reply text.

Handlers never raise for a missing collaborator: CollaboratorUnavailable
turns into a friendly explanation, and malformed input into a usage hint.
Anything else propagates to the message processor, which apologizes.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable

from src.core.budget import PERIODS, format_status
from src.core.recurrence import InvalidScheduleError
from src.core.router import REMINDER_DELETE_RE, Intent, route
from src.core.social_media import PLATFORMS
from src.core.spending import format_summary, period_from_text
from src.ports.collaborator import CollaboratorUnavailable

if TYPE_CHECKING:
    from src.core.budget import BudgetTracker
    from src.core.personality import Personality
    from src.core.reminders import ReminderScheduler
    from src.core.social_media import UsageTracker
    from src.core.spending import SpendingAnalyzer
    from src.data.activity_log import ActivityLog
    from src.ports.email_port import EmailPort
    from src.ports.finance_port import FinancePort

logger = logging.getLogger(__name__)

HELP_TEXT = """\
Hey! Here's what I can do:

💰 Finance:
- "spending" - See spending summary (add "today" or "month")
- "balance" - Check account balances
- "set budget daily 50" - Set a budget (daily/weekly/monthly/category)
- "check budget weekly" - Budget status
- "budget" - All budgets

⏰ Reminders:
- "remind me to stretch at 14:30" (add "daily" or "weekly on mon")
- "remind me to drink water every 2 hours from 09:00 to 17:00"
- "my reminders" / "delete reminder 3"

📝 Activity:
- "worked on the report for 2 hours", "meeting with Dana", "did laundry"
- "summary" / "weekly summary"

📱 Social Media:
- "social media" - Usage summary
- "log [platform] [minutes]" - Log usage (e.g. "log instagram 45")

📧 Email:
- "check email" - Important unread emails

🤖 Bot Commands:
- "learn my style" - Analyze your texting
- "reset" - Clear conversation history
- "help" - This message

Just chat with me normally and I'll keep you accountable!"""

REMINDER_HINT = (
    "I couldn't catch that reminder. Try:\n"
    '- "remind me to stretch at 14:30"\n'
    '- "remind me to call mom at 18:00 weekly on sunday"\n'
    '- "remind me to drink water every 2 hours from 09:00 to 17:00"'
)

# Interval patterns are a superset of the at-time ones and are tried first.
_INTERVAL_RE = re.compile(
    r"remind me (?:to )?(?P<message>.+?) every (?P<step>\d+) ?(?:hours?|hrs?|h)\b"
    r".*?from (?P<start>\d{1,2}:\d{2}) (?:to|until|-) (?P<end>\d{1,2}:\d{2})",
    re.IGNORECASE,
)
_AT_TIME_RE = re.compile(
    r"remind me (?:to )?(?P<message>.+?) at (?P<time>\d{1,2}:\d{2})"
    r"(?:\s+(?P<freq>daily|every ?day|weekly on (?P<wday>\w+)|every (?P<eday>\w+)|on (?P<oday>\w+)))?",
    re.IGNORECASE,
)
_DURATION_RE = re.compile(
    r"\s+for\s+(?P<amount>\d+(?:\.\d+)?)\s*(?P<unit>hours?|hrs?|h|minutes?|mins?|m)\b",
    re.IGNORECASE,
)
_ACTIVITY_CATEGORIES = (
    ("worked on", "work"),
    ("meeting with", "meeting"),
    ("did ", "personal"),
)


@dataclass
class ReminderRequest:
    message: str
    schedule: dict


def parse_reminder(text: str) -> ReminderRequest | None:
    """Extract message + schedule from a reminder command, or None."""
    match = _INTERVAL_RE.search(text)
    if match:
        return ReminderRequest(
            message=match["message"].strip(),
            schedule={
                "frequency": "interval",
                "start_time": match["start"],
                "end_time": match["end"],
                "interval_hours": int(match["step"]),
            },
        )

    match = _AT_TIME_RE.search(text)
    if match is None:
        return None

    freq = (match["freq"] or "").lower()
    day = match["wday"] or match["eday"] or match["oday"]
    if freq in ("daily", "everyday", "every day"):
        schedule = {"frequency": "daily", "time": match["time"]}
    elif day:
        schedule = {"frequency": "weekly", "time": match["time"], "day": day}
    else:
        schedule = {"frequency": "once", "time": match["time"]}
    return ReminderRequest(message=match["message"].strip(), schedule=schedule)


def parse_activity(text: str) -> tuple[str, int | None, str | None]:
    """Return (description, duration_minutes, category) for an activity message."""
    description = text.strip()
    duration = None
    match = _DURATION_RE.search(description)
    if match:
        amount = float(match["amount"])
        minutes = amount * 60 if match["unit"].lower().startswith("h") else amount
        duration = int(round(minutes))
        description = (description[:match.start()] + description[match.end():]).strip()

    lower = text.lower()
    category = next((cat for key, cat in _ACTIVITY_CATEGORIES if key in lower), None)
    return description, duration, category


class CommandService:
    """Dispatches a routed message to its handler and returns the reply."""

    def __init__(
        self,
        personality: Personality,
        reminders: ReminderScheduler,
        budget: BudgetTracker,
        spending: SpendingAnalyzer,
        usage: UsageTracker,
        activities: ActivityLog,
        finance: FinancePort,
        email: EmailPort,
    ) -> None:
        self.personality = personality
        self.reminders = reminders
        self.budget = budget
        self.spending = spending
        self.usage = usage
        self.activities = activities
        self.finance = finance
        self.email = email
        self._handlers: dict[Intent, Callable[[str], Awaitable[str]]] = {
            Intent.HELP: self.help,
            Intent.SPENDING_QUERY: self.spending_query,
            Intent.BALANCE_QUERY: self.balance_query,
            Intent.SOCIAL_MEDIA_QUERY: self.social_media_query,
            Intent.USAGE_LOG: self.usage_log,
            Intent.BUDGET_SET: self.budget_set,
            Intent.BUDGET_CHECK: self.budget_check,
            Intent.BUDGET_SUMMARY: self.budget_summary,
            Intent.REMINDER_CREATE: self.reminder_create,
            Intent.REMINDER_LIST: self.reminder_list,
            Intent.REMINDER_DELETE: self.reminder_delete,
            Intent.ACTIVITY_LOG: self.activity_log,
            Intent.SUMMARY_DAILY: self.summary_daily,
            Intent.SUMMARY_WEEKLY: self.summary_weekly,
            Intent.EMAIL_CHECK: self.email_check,
            Intent.STYLE_LEARN: self.style_learn,
            Intent.CONTEXT_RESET: self.context_reset,
            Intent.FREEFORM_CHAT: self.freeform_chat,
        }

    async def handle(self, text: str) -> str:
        intent = route(text)
        logger.info("Routed %r -> %s", text[:50], intent.value)
        return await self._handlers[intent](text)

    # ------------------------------------------------------------------
    # Finance
    # ------------------------------------------------------------------

    async def help(self, text: str) -> str:
        return HELP_TEXT

    async def spending_query(self, text: str) -> str:
        try:
            summary = await self.spending.summary(period_from_text(text))
            trend = await self.spending.trend()
        except CollaboratorUnavailable as exc:
            logger.warning("Spending query unavailable: %s", exc)
            return "Couldn't fetch your spending data. Check if Plaid is set up correctly."
        return format_summary(summary, trend)

    async def balance_query(self, text: str) -> str:
        try:
            accounts = await self.finance.get_account_balances()
        except CollaboratorUnavailable as exc:
            logger.warning("Balance query unavailable: %s", exc)
            return "Couldn't get your balances. Check your Plaid setup."

        if not accounts:
            return "No accounts linked. Make sure Plaid is configured!"

        lines = ["💳 Account Balances:", ""]
        lines += [f"{a.name or 'Unknown Account'}: ${a.current_balance:.2f}" for a in accounts]
        return "\n".join(lines)

    async def budget_set(self, text: str) -> str:
        parts = text.strip().split()
        # "set budget <period|category> <amount>"
        if len(parts) < 4:
            return (
                "Usage: set budget [daily|weekly|monthly|category] [amount]\n"
                "Example: set budget daily 50"
            )
        name = " ".join(parts[2:-1]).lower()
        try:
            amount = float(parts[-1].lstrip("$"))
        except ValueError:
            return "Amount must be a number! Example: set budget daily 50"
        if not math.isfinite(amount):
            return "Amount must be a number! Example: set budget daily 50"
        if amount <= 0:
            return "Budget has to be more than $0, bestie."

        self.budget.set_budget(name, amount)
        kind = "budget" if name in PERIODS else "category budget"
        return f"✅ Set {name} {kind} to ${amount:.2f}"

    async def budget_check(self, text: str) -> str:
        lower = text.lower()
        period = next((p for p in PERIODS if p in lower), "daily")
        try:
            status = await self.budget.check(period)
        except CollaboratorUnavailable as exc:
            logger.warning("Budget check unavailable: %s", exc)
            return "Couldn't check your budget. Your bank account isn't connected."
        return format_status(status)

    async def budget_summary(self, text: str) -> str:
        try:
            return await self.budget.summary()
        except CollaboratorUnavailable as exc:
            logger.warning("Budget summary unavailable: %s", exc)
            return "Couldn't build your budget summary. Your bank account isn't connected."

    # ------------------------------------------------------------------
    # Social media
    # ------------------------------------------------------------------

    async def social_media_query(self, text: str) -> str:
        return f"📱 {self.usage.summary()}"

    async def usage_log(self, text: str) -> str:
        parts = text.lower().split()
        if len(parts) < 3:
            return "Usage: log [platform] [minutes]\nExample: log instagram 45"

        platform = parts[1]
        try:
            minutes = int(parts[2])
        except ValueError:
            return "Minutes must be a number!"

        if platform not in PLATFORMS:
            return f"Unknown platform. Use: {', '.join(PLATFORMS)}"

        total = self.usage.log_usage(platform, minutes)
        return f"✅ Logged {minutes} min on {platform}. Total today: {total:.1f}h"

    # ------------------------------------------------------------------
    # Reminders
    # ------------------------------------------------------------------

    async def reminder_create(self, text: str) -> str:
        request = parse_reminder(text)
        if request is None or not request.message:
            return REMINDER_HINT
        try:
            reminder = self.reminders.create(request.message, **request.schedule)
        except InvalidScheduleError as exc:
            return f"❌ {exc}\n\n{REMINDER_HINT}"

        when = reminder.time
        if reminder.frequency == "weekly":
            when += f" every {reminder.day}"
        elif reminder.frequency == "daily":
            when += " daily"
        elif reminder.frequency == "interval":
            when += f" every {request.schedule['interval_hours']}h"
        return f"✅ Reminder #{reminder.id} set: {reminder.message} ({when})"

    async def reminder_list(self, text: str) -> str:
        return self.reminders.summary()

    async def reminder_delete(self, text: str) -> str:
        match = REMINDER_DELETE_RE.search(text.lower())
        if match is None:
            return "Usage: delete reminder [id]"
        reminder_id = int(match.group(1))
        if self.reminders.delete(reminder_id):
            return f"🗑️ Deleted reminder #{reminder_id}"
        return f"No reminder #{reminder_id} found. Try \"my reminders\"."

    # ------------------------------------------------------------------
    # Activity
    # ------------------------------------------------------------------

    async def activity_log(self, text: str) -> str:
        description, duration, category = parse_activity(text)
        self.activities.log(description, duration=duration, category=category)
        suffix = f" ({duration} min)" if duration else ""
        return f"✅ Logged: {description}{suffix}"

    async def summary_daily(self, text: str) -> str:
        return self.activities.daily_summary()

    async def summary_weekly(self, text: str) -> str:
        return self.activities.weekly_summary()

    # ------------------------------------------------------------------
    # Email
    # ------------------------------------------------------------------

    async def email_check(self, text: str) -> str:
        try:
            emails = await self.email.get_important_messages()
        except CollaboratorUnavailable as exc:
            logger.warning("Email check unavailable: %s", exc)
            return "Gmail isn't connected yet. Run the Gmail authorization script first."
        if not emails:
            return "📧 No important emails right now. Inbox zero energy ✨"
        return format_emails(emails)

    # ------------------------------------------------------------------
    # Conversation
    # ------------------------------------------------------------------

    async def style_learn(self, text: str) -> str:
        if await self.personality.learn_style():
            return "Got it! I've analyzed your texting style and I'll match it from now on."
        return "I need more messages from you to learn your style. Keep texting!"

    async def context_reset(self, text: str) -> str:
        self.personality.reset()
        return "Alright, clean slate. What's up?"

    async def freeform_chat(self, text: str) -> str:
        return await self.personality.generate(text)


def format_emails(emails: list, limit: int = 5) -> str:
    count = len(emails)
    lines = [
        "📧 *Important Emails Alert*",
        "",
        f"You have {count} important email{'s' if count > 1 else ''} that need attention:",
        "",
    ]
    for e in emails[:limit]:
        lines += [f"*From:* {e.sender}", f"*Subject:* {e.subject}", f"_{e.snippet}_", ""]
    if count > limit:
        lines.append(f"_...and {count - limit} more_")
    return "\n".join(lines).rstrip()
