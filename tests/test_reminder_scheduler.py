"""
Tests for Reminder Scheduler
Start/stop lifecycle, overlap protection and cron timing
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from zoneinfo import ZoneInfo

import pytest

from taskboard.core.celery_app import parse_cron
from taskboard.services.reminder import SweepResult
from taskboard.services.reminder_scheduler import ReminderScheduler


TZ = ZoneInfo("Asia/Ho_Chi_Minh")
SCHEDULES = {"daily": "0 8 * * *", "frequent": "0 8-18/2 * * *"}


def _local(hour, minute=0, day=2):
    return datetime(2026, 3, day, hour, minute, tzinfo=TZ)


def _reminder_service(now):
    service = AsyncMock()
    service.clock = lambda: now
    service.tz = TZ
    service.check_due_reminders.return_value = SweepResult(cards_scanned=3, notifications_sent=2)
    return service


@pytest.fixture
def reminder_service(fixed_now):
    return _reminder_service(fixed_now)


@pytest.fixture
def scheduler(reminder_service):
    return ReminderScheduler(reminder_service, schedules=SCHEDULES)


# ==================== Lifecycle ====================

class TestLifecycle:

    @pytest.mark.asyncio
    async def test_start_spawns_one_task_per_schedule(self, scheduler):
        await scheduler.start()
        try:
            assert scheduler.is_running()
            assert len(scheduler.worker_tasks) == 2
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, scheduler):
        await scheduler.start()
        await scheduler.start()
        try:
            assert len(scheduler.worker_tasks) == 2
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_resets_state(self, scheduler):
        await scheduler.start()
        tasks = list(scheduler.worker_tasks)

        await scheduler.stop()

        assert not scheduler.is_running()
        assert scheduler.worker_tasks == []
        assert all(task.done() for task in tasks)

    @pytest.mark.asyncio
    async def test_stop_when_not_running(self, scheduler):
        await scheduler.stop()
        await scheduler.stop()
        assert not scheduler.is_running()

    @pytest.mark.asyncio
    async def test_can_restart(self, scheduler):
        await scheduler.start()
        await scheduler.stop()
        await scheduler.start()
        try:
            assert scheduler.is_running()
            assert len(scheduler.worker_tasks) == 2
        finally:
            await scheduler.stop()

    @pytest.mark.asyncio
    async def test_instances_are_independent(self, reminder_service):
        first = ReminderScheduler(reminder_service, schedules=SCHEDULES)
        second = ReminderScheduler(reminder_service, schedules={"daily": "0 8 * * *"})

        await first.start()
        try:
            assert first.is_running()
            assert not second.is_running()
            assert second.worker_tasks == []
        finally:
            await first.stop()

    def test_invalid_expression(self, reminder_service):
        with pytest.raises(ValueError):
            ReminderScheduler(reminder_service, schedules={"broken": "0 8 * *"})

    def test_no_schedules(self, reminder_service):
        assert ReminderScheduler(reminder_service, schedules={}).schedules == {}


# ==================== Sweeps ====================

class TestRunImmediately:

    @pytest.mark.asyncio
    async def test_returns_sweep_result(self, scheduler, reminder_service):
        result = await scheduler.run_immediately()

        assert result.cards_scanned == 3
        assert result.notifications_sent == 2
        reminder_service.check_due_reminders.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_works_without_start(self, scheduler):
        assert not scheduler.is_running()
        assert (await scheduler.run_immediately()).skipped_overlap is False

    @pytest.mark.asyncio
    async def test_overlapping_sweeps_are_skipped(self, scheduler, reminder_service):
        release = asyncio.Event()

        async def slow_sweep():
            await release.wait()
            return SweepResult(cards_scanned=1)

        reminder_service.check_due_reminders.side_effect = slow_sweep

        first = asyncio.create_task(scheduler.run_immediately())
        await asyncio.sleep(0)
        second = await scheduler.run_immediately()
        release.set()
        first_result = await first

        assert second.skipped_overlap is True
        assert first_result.cards_scanned == 1
        assert reminder_service.check_due_reminders.await_count == 1

    @pytest.mark.asyncio
    async def test_schedule_loop_runs_sweep_when_due(self, reminder_service):
        scheduler = ReminderScheduler(
            reminder_service,
            schedules={"daily": "0 8 * * *"},
            clock=lambda: _local(7, 30).astimezone(timezone.utc),
        )
        delays = []

        async def fake_sleep(delay):
            delays.append(delay)
            scheduler.running = False

        scheduler._sleep = fake_sleep
        scheduler.running = True

        await scheduler._schedule_loop("daily", scheduler.schedules["daily"])

        assert delays == [pytest.approx(timedelta(minutes=30).total_seconds())]
        reminder_service.check_due_reminders.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_failed_sweep_keeps_loop_alive(self, reminder_service):
        scheduler = ReminderScheduler(reminder_service, schedules={"daily": "0 8 * * *"})
        reminder_service.check_due_reminders.side_effect = RuntimeError("database down")
        calls = []

        async def fake_sleep(delay):
            calls.append(delay)
            if len(calls) == 2:
                scheduler.running = False

        scheduler._sleep = fake_sleep
        scheduler.running = True

        await scheduler._schedule_loop("daily", scheduler.schedules["daily"])

        assert reminder_service.check_due_reminders.await_count == 2


# ==================== Cron timing ====================

class TestNextFireTime:

    def _scheduler(self, now):
        return ReminderScheduler(_reminder_service(now), schedules=SCHEDULES)

    def test_daily_later_today(self):
        now = _local(7, 30)
        assert self._scheduler(now).next_fire_time("daily", after=now) == _local(8)

    def test_daily_after_run_is_tomorrow(self):
        now = _local(8)
        assert self._scheduler(now).next_fire_time("daily", after=now) == _local(8, day=3)

    def test_frequent_every_two_hours(self):
        now = _local(8)
        assert self._scheduler(now).next_fire_time("frequent", after=now) == _local(10)

    def test_frequent_stops_after_business_hours(self):
        now = _local(18)
        assert self._scheduler(now).next_fire_time("frequent", after=now) == _local(8, day=3)

    def test_fires_are_strictly_increasing(self):
        now = _local(6)
        scheduler = self._scheduler(now)
        fires = []
        after = now
        for _ in range(7):
            after = scheduler.next_fire_time("frequent", after=after)
            fires.append(after)

        assert fires == sorted(set(fires))
        assert [fire.hour for fire in fires[:6]] == [8, 10, 12, 14, 16, 18]

    def test_utc_clock_is_interpreted_in_reminder_timezone(self):
        # 00:30 UTC is 07:30 in Asia/Ho_Chi_Minh
        now = datetime(2026, 3, 2, 0, 30, tzinfo=timezone.utc)
        assert self._scheduler(now).next_fire_time("daily", after=now) == _local(8)


def test_parse_cron_fields():
    schedule = parse_cron("0 8-18/2 * * 1-5")
    assert schedule.hour == {8, 10, 12, 14, 16, 18}
    assert schedule.minute == {0}
    assert schedule.day_of_week == {1, 2, 3, 4, 5}
