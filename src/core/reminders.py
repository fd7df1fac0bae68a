"""
Sidekick Assistant — Reminder Store & Scheduler.

ReminderStore keeps reminder records in memory (no durable storage) and
hands out monotonically increasing ids that are never reused.

ReminderScheduler binds every active reminder to a recurring timer on the
SchedulerPort and dispatches "⏰ Reminder: ..." when it fires. One-shot
reminders deactivate and cancel their own timer on the first firing.
"""

from __future__ import annotations

import itertools
import logging
from typing import TYPE_CHECKING

from src.core.recurrence import (
    build_rule,
    derive_trigger,
    describe,
    display_time,
)
from src.data.models import Reminder, WeeklyAt

if TYPE_CHECKING:
    from src.core.dispatcher import NotificationDispatcher
    from src.ports.scheduler_port import JobHandle, SchedulerPort

logger = logging.getLogger(__name__)


class ReminderStore:
    """In-memory reminder records in creation order."""

    def __init__(self) -> None:
        self._reminders: dict[int, Reminder] = {}
        self._ids = itertools.count(1)

    def create(
        self,
        message: str,
        frequency: str = "once",
        time: str | None = None,
        day: str | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        interval_hours: int | None = None,
    ) -> Reminder:
        """Validate the schedule and store a new active reminder.

        Raises InvalidScheduleError on a malformed schedule; no id is
        consumed in that case.
        """
        rule = build_rule(
            frequency,
            time=time,
            day=day,
            start_time=start_time,
            end_time=end_time,
            interval_hours=interval_hours,
        )
        reminder = Reminder(
            id=next(self._ids),
            message=message,
            rule=rule,
            trigger=derive_trigger(rule),
            time=display_time(rule),
            day=rule.day if isinstance(rule, WeeklyAt) else None,
        )
        self._reminders[reminder.id] = reminder
        logger.info(
            "Reminder created: #%d '%s' at %s (%s)",
            reminder.id, message, reminder.time, describe(rule),
        )
        return reminder

    def get(self, reminder_id: int) -> Reminder | None:
        return self._reminders.get(reminder_id)

    def delete(self, reminder_id: int) -> bool:
        """Remove a reminder. Returns False if the id is unknown."""
        if self._reminders.pop(reminder_id, None) is None:
            return False
        logger.info("Deleted reminder #%d", reminder_id)
        return True

    def list(self) -> list[Reminder]:
        return list(self._reminders.values())

    def active(self) -> list[Reminder]:
        return [r for r in self._reminders.values() if r.active]


class ReminderScheduler:
    """Binds reminders from a ReminderStore to a SchedulerPort."""

    def __init__(
        self,
        store: ReminderStore,
        dispatcher: NotificationDispatcher,
    ) -> None:
        self.store = store
        self._dispatcher = dispatcher
        self._scheduler: SchedulerPort | None = None
        self._handles: dict[int, JobHandle] = {}

    @property
    def attached(self) -> bool:
        return self._scheduler is not None

    def attach(self, scheduler: SchedulerPort) -> int:
        """Bind every active, unbound reminder. Returns how many were bound."""
        self._scheduler = scheduler
        bound = 0
        for reminder in self.store.active():
            if reminder.id not in self._handles and self._bind(reminder):
                bound += 1
        logger.info("Started %d reminders", bound)
        return bound

    def detach(self) -> None:
        for handle in self._handles.values():
            handle.cancel()
        self._handles.clear()
        self._scheduler = None

    def create(self, message: str, **schedule) -> Reminder:
        """Create a reminder and bind it right away if a scheduler is attached."""
        reminder = self.store.create(message, **schedule)
        if self._scheduler is not None:
            self._bind(reminder)
        return reminder

    def delete(self, reminder_id: int) -> bool:
        """Cancel the timer (synchronously) and drop the record."""
        handle = self._handles.pop(reminder_id, None)
        if handle is not None:
            handle.cancel()
        return self.store.delete(reminder_id)

    def list(self) -> list[Reminder]:
        return self.store.list()

    def summary(self) -> str:
        """Formatted list of active reminders for chat display."""
        reminders = self.store.list()
        if not reminders:
            return 'No reminders set. Use "remind me [message] at [time]" to create one.'

        active = [r for r in reminders if r.active]
        if not active:
            return "No active reminders."

        lines = ["⏰ Your Reminders:", ""]
        for r in active:
            lines.append(f"#{r.id}: {r.message}")
            lines.append(f"   ⏱️ {r.time} ({describe(r.rule)})")
            lines.append("")
        lines.append('Use "delete reminder [id]" to remove a reminder.')
        return "\n".join(lines)

    def _bind(self, reminder: Reminder) -> bool:
        if self._scheduler is None:
            raise RuntimeError("ReminderScheduler is not attached to a scheduler")

        async def _fire() -> None:
            await self._fire(reminder.id)

        try:
            handle = self._scheduler.schedule_recurring(
                reminder.trigger, _fire, name=f"reminder_{reminder.id}",
            )
        except Exception as exc:
            # Not retried: the reminder stays stored but never fires.
            logger.warning(
                "Could not schedule reminder #%d (%s): %s",
                reminder.id, reminder.trigger.expression, exc,
            )
            reminder.active = False
            return False

        self._handles[reminder.id] = handle
        return True

    async def _fire(self, reminder_id: int) -> None:
        reminder = self.store.get(reminder_id)
        if reminder is None or not reminder.active:
            return

        logger.info("Triggering reminder: %s", reminder.message)
        if reminder.is_one_shot:
            # Deactivate before awaiting so a late duplicate firing is a no-op.
            reminder.active = False
            handle = self._handles.pop(reminder_id, None)
            if handle is not None:
                handle.cancel()

        await self._dispatcher.send(f"⏰ Reminder: {reminder.message}")

        if reminder.is_one_shot:
            logger.info("One-time reminder completed: %s", reminder.message)
