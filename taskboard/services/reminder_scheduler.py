"""
Reminder Scheduler
Runs the due-reminder sweep on cron schedules inside the API process
"""

import asyncio
from datetime import datetime
from typing import Callable, Dict, List, Optional

import structlog
from celery.schedules import crontab

from taskboard.core.celery_app import parse_cron, reminder_cron_settings
from taskboard.core.metrics import REMINDER_SWEEP_DURATION, REMINDER_SWEEPS_SKIPPED, REMINDER_SWEEPS_TOTAL
from taskboard.services.reminder import ReminderService, SweepResult, reminder_service

logger = structlog.get_logger()


class ReminderScheduler:
    """
    Owns one asyncio task per cron schedule.

    Sweeps never overlap within a process; a tick that finds a sweep in
    progress is skipped. Duplicate reminders across processes are prevented
    by the reminder log.
    """

    def __init__(
        self,
        reminder_service: ReminderService = reminder_service,
        schedules: Optional[Dict[str, str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.reminder_service = reminder_service
        self.clock = clock or reminder_service.clock
        self.running = False
        self.worker_tasks: List[asyncio.Task] = []
        self._sweep_lock = asyncio.Lock()
        self._sleep = asyncio.sleep

        expressions = reminder_cron_settings() if schedules is None else dict(schedules)
        self.schedules: Dict[str, crontab] = {
            name: parse_cron(expression, nowfun=self._now)
            for name, expression in expressions.items()
        }

    def _now(self) -> datetime:
        return self.clock().astimezone(self.reminder_service.tz)

    async def start(self):
        """Start one worker per schedule"""
        if self.running:
            logger.warning("Reminder scheduler already running")
            return

        self.running = True
        for name, schedule in self.schedules.items():
            task = asyncio.create_task(self._schedule_loop(name, schedule))
            self.worker_tasks.append(task)

        logger.info(
            "Reminder scheduler started",
            schedules={name: str(schedule) for name, schedule in self.schedules.items()},
            workers=len(self.worker_tasks),
        )

    async def stop(self):
        """Stop all workers; the scheduler can be started again afterwards"""
        if not self.running and not self.worker_tasks:
            return

        logger.info("Stopping reminder scheduler")
        self.running = False

        for task in self.worker_tasks:
            task.cancel()

        if self.worker_tasks:
            await asyncio.gather(*self.worker_tasks, return_exceptions=True)

        self.worker_tasks.clear()
        logger.info("Reminder scheduler stopped")

    def is_running(self) -> bool:
        return self.running

    async def run_immediately(self) -> SweepResult:
        """Run one sweep now"""
        return await self._run_sweep(trigger="manual")

    def next_fire_time(self, name: str, after: Optional[datetime] = None) -> datetime:
        """Next time the named schedule fires strictly after `after` (default: now)"""
        schedule = self.schedules[name]
        now = self._now()
        last_run_at = (after or now).astimezone(self.reminder_service.tz)
        return now + schedule.remaining_estimate(last_run_at)

    async def _run_sweep(self, trigger: str) -> SweepResult:
        if self._sweep_lock.locked():
            logger.warning("Reminder sweep already in progress, tick skipped", trigger=trigger)
            REMINDER_SWEEPS_SKIPPED.inc()
            return SweepResult(skipped_overlap=True)

        async with self._sweep_lock:
            logger.info("Running reminder sweep", trigger=trigger)
            REMINDER_SWEEPS_TOTAL.labels(trigger=trigger).inc()
            with REMINDER_SWEEP_DURATION.time():
                return await self.reminder_service.check_due_reminders()

    async def _schedule_loop(self, name: str, schedule: crontab):
        logger.info("Reminder schedule loop started", schedule=name)
        last_run_at = self._now()
        try:
            while self.running:
                fire_at = self.next_fire_time(name, after=last_run_at)
                delay = (fire_at - self._now()).total_seconds()
                logger.debug("Next reminder sweep", schedule=name, fire_at=fire_at.isoformat())
                if delay > 0:
                    await self._sleep(delay)
                last_run_at = fire_at

                try:
                    await self._run_sweep(trigger=name)
                except Exception as e:
                    logger.error("Scheduled reminder sweep failed", schedule=name, error=str(e))
        except asyncio.CancelledError:
            logger.info("Reminder schedule loop cancelled", schedule=name)
            raise


reminder_scheduler = ReminderScheduler()
