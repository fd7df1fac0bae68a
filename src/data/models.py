"""
Sidekick Assistant — Data Models.

Plain records shared between the core, the ports and the adapters.
Reminders live only in memory; activities and the learned texting style
are the only records written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class CronSpec:
    """Cron-like trigger fields derived from a recurrence rule.

    Field syntax follows the usual crontab conventions, with named
    weekdays ("mon".."sun") so no numbering scheme leaks into adapters.
    """

    minute: str
    hour: str
    day_of_week: str = "*"

    @property
    def expression(self) -> str:
        return f"{self.minute} {self.hour} * * {self.day_of_week}"


@dataclass(frozen=True)
class OnceAt:
    """Fire once at the next occurrence of hour:minute."""

    hour: int
    minute: int
    kind: str = field(default="once", init=False)


@dataclass(frozen=True)
class DailyAt:
    hour: int
    minute: int
    kind: str = field(default="daily", init=False)


@dataclass(frozen=True)
class WeeklyAt:
    hour: int
    minute: int
    day: str                  # three-letter lowercase weekday, e.g. "mon"
    kind: str = field(default="weekly", init=False)


@dataclass(frozen=True)
class IntervalBetween:
    """Fire every `step_hours` from start_hour to end_hour inclusive."""

    start_hour: int
    end_hour: int
    step_hours: int
    kind: str = field(default="interval", init=False)


RecurrenceRule = OnceAt | DailyAt | WeeklyAt | IntervalBetween


@dataclass
class Reminder:
    """A user-defined scheduled notification."""

    id: int
    message: str
    rule: RecurrenceRule
    trigger: CronSpec
    time: str                       # display time, "HH:MM" or "HH:MM-HH:MM"
    active: bool = True
    day: str | None = None          # weekly reminders only

    @property
    def frequency(self) -> str:
        return self.rule.kind

    @property
    def is_one_shot(self) -> bool:
        return isinstance(self.rule, OnceAt)


@dataclass
class Transaction:
    """A bank transaction. Positive amount = money out."""

    id: str
    amount: float
    category: str
    merchant: str
    date: str                       # ISO date YYYY-MM-DD


@dataclass
class AccountBalance:
    name: str
    current_balance: float


@dataclass
class EmailSummary:
    id: str
    sender: str
    subject: str
    snippet: str


@dataclass
class Activity:
    """A logged activity, persisted as one JSON object in the activity log."""

    id: int
    timestamp: str                  # ISO datetime
    description: str
    date: str                       # ISO date YYYY-MM-DD
    duration: int | None = None     # minutes
    category: str | None = None     # work, meeting, personal, ...

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "description": self.description,
            "duration": self.duration,
            "category": self.category,
            "date": self.date,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Activity:
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            description=data["description"],
            date=data["date"],
            duration=data.get("duration"),
            category=data.get("category"),
        )


@dataclass
class InboundMessage:
    """Transport-neutral inbound message."""

    sender: str
    to: str
    body: str
    from_me: bool
    id: str

    @property
    def chat_id(self) -> str:
        """The conversation this message belongs to."""
        return self.to if self.from_me else self.sender
