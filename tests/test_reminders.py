"""Tests for src.core.reminders — reminder store and scheduler binding."""

import pytest

from conftest import FailingScheduler
from src.core.recurrence import InvalidScheduleError
from src.core.reminders import ReminderScheduler, ReminderStore
from src.data.models import CronSpec


@pytest.fixture
def store():
    return ReminderStore()


@pytest.fixture
def reminders(store, dispatcher):
    return ReminderScheduler(store, dispatcher)


# ---------------------------------------------------------------------------
# ReminderStore
# ---------------------------------------------------------------------------


class TestReminderStore:
    def test_ids_increase(self, store):
        first = store.create("a", time="09:00")
        second = store.create("b", time="10:00")
        assert (first.id, second.id) == (1, 2)

    def test_ids_not_reused_after_delete(self, store):
        store.create("a", time="09:00")
        assert store.delete(1) is True
        assert store.create("b", time="10:00").id == 2

    def test_invalid_schedule_consumes_no_id(self, store):
        with pytest.raises(InvalidScheduleError):
            store.create("a", time="25:00")
        assert store.create("b", time="10:00").id == 1
        assert len(store.list()) == 1

    def test_delete_unknown(self, store):
        assert store.delete(42) is False

    def test_delete_twice(self, store):
        store.create("a", time="09:00")
        assert store.delete(1) is True
        assert store.delete(1) is False
        assert store.list() == []

    def test_list_in_creation_order(self, store):
        store.create("a", time="09:00")
        store.create("b", frequency="daily", time="10:00")
        store.create("c", frequency="weekly", time="11:00", day="tuesday")
        assert [r.message for r in store.list()] == ["a", "b", "c"]

    def test_weekly_fields(self, store):
        r = store.create("call mom", frequency="weekly", time="18:00", day="Sunday")
        assert r.frequency == "weekly"
        assert r.day == "sun"
        assert r.time == "18:00"
        assert r.trigger == CronSpec("0", "18", "sun")

    def test_interval_fields(self, store):
        r = store.create(
            "drink water", frequency="interval",
            start_time="09:00", end_time="17:00", interval_hours=2,
        )
        assert r.time == "09:00-17:00"
        assert r.trigger.hour == "9,11,13,15,17"
        assert r.active is True


# ---------------------------------------------------------------------------
# ReminderScheduler
# ---------------------------------------------------------------------------


class TestReminderScheduler:
    def test_create_before_attach_is_unbound(self, reminders, scheduler):
        reminders.create("a", time="09:00")
        assert scheduler.jobs == {}

    def test_attach_binds_active_reminders(self, reminders, scheduler):
        reminders.create("a", time="09:00")
        reminders.create("b", frequency="daily", time="10:00")
        assert reminders.attach(scheduler) == 2
        assert set(scheduler.jobs) == {"reminder_1", "reminder_2"}

    def test_create_after_attach_binds(self, reminders, scheduler):
        reminders.attach(scheduler)
        reminders.create("a", frequency="daily", time="10:15")
        assert scheduler.jobs["reminder_1"].trigger == CronSpec("15", "10")

    def test_delete_cancels_timer(self, reminders, scheduler):
        reminders.attach(scheduler)
        reminders.create("a", frequency="daily", time="10:15")
        assert reminders.delete(1) is True
        assert scheduler.jobs["reminder_1"].cancelled is True
        assert reminders.list() == []

    def test_delete_unknown(self, reminders, scheduler):
        reminders.attach(scheduler)
        assert reminders.delete(7) is False

    def test_binding_failure_deactivates(self, reminders):
        reminders.attach(FailingScheduler())
        r = reminders.create("a", time="09:00")
        assert r.active is False
        assert reminders.list() == [r]

    def test_bind_without_scheduler_raises(self, reminders, store):
        r = store.create("a", time="09:00")
        with pytest.raises(RuntimeError, match="not attached"):
            reminders._bind(r)

    def test_detach_cancels_all(self, reminders, scheduler):
        reminders.attach(scheduler)
        reminders.create("a", frequency="daily", time="09:00")
        reminders.create("b", frequency="daily", time="10:00")
        reminders.detach()
        assert all(job.cancelled for job in scheduler.jobs.values())
        assert reminders.attached is False

    @pytest.mark.asyncio
    async def test_recurring_reminder_keeps_firing(self, reminders, scheduler, transport):
        reminders.attach(scheduler)
        r = reminders.create("stretch", frequency="daily", time="10:00")
        await scheduler.fire("reminder_1")
        await scheduler.fire("reminder_1")
        assert transport.send_message.await_count == 2
        assert r.active is True

    @pytest.mark.asyncio
    async def test_deleted_reminder_callback_is_noop(self, reminders, scheduler, transport):
        reminders.attach(scheduler)
        reminders.create("stretch", frequency="daily", time="10:00")
        callback = scheduler.jobs["reminder_1"].callback
        reminders.delete(1)
        await callback()
        transport.send_message.assert_not_called()

    def test_summary_empty(self, reminders):
        assert "No reminders set" in reminders.summary()

    def test_summary_lists_active(self, reminders):
        reminders.create("stretch", frequency="weekly", time="10:00", day="mon")
        text = reminders.summary()
        assert "#1: stretch" in text
        assert "10:00 (weekly on mon)" in text


# ---------------------------------------------------------------------------
# End to end: one-shot reminder
# ---------------------------------------------------------------------------


class TestOneShotReminder:
    @pytest.mark.asyncio
    async def test_drink_water_once(self, reminders, scheduler, transport):
        reminders.attach(scheduler)
        r = reminders.create("drink water", frequency="once", time="14:30")

        assert r.id == 1
        assert r.active is True
        assert scheduler.jobs["reminder_1"].trigger == CronSpec("30", "14")

        await scheduler.fire("reminder_1")

        transport.send_message.assert_awaited_once_with("15550001111", "⏰ Reminder: drink water")
        assert r.active is False
        assert scheduler.jobs["reminder_1"].cancelled is True
        assert reminders.list() == [r]

        # A late duplicate firing sends nothing
        await scheduler.jobs["reminder_1"].callback()
        assert transport.send_message.await_count == 1

    @pytest.mark.asyncio
    async def test_inactive_one_shot_not_rebound(self, reminders, scheduler):
        reminders.attach(scheduler)
        reminders.create("drink water", time="14:30")
        await scheduler.fire("reminder_1")
        reminders.detach()

        assert reminders.attach(scheduler) == 0
        assert "No active reminders" in reminders.summary()
