"""
Celery Application Configuration
Background reminder sweeps with Redis as broker
"""

from typing import Callable, Optional

from celery import Celery
from celery.schedules import crontab

from taskboard.core.config import settings

celery_app = Celery(
    "taskboard",
    broker=settings.REDIS_URL,
    backend=settings.REDIS_URL,
    include=["taskboard.tasks.reminder_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    # Cron expressions are written in the reminder time zone
    timezone=settings.REMINDER_TIMEZONE,
    enable_utc=True,
    task_track_started=True,
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    task_soft_time_limit=600,
    task_time_limit=900,
)


def parse_cron(expression: str, nowfun: Optional[Callable] = None) -> crontab:
    """
    Build a crontab from a five-field expression
    (minute hour day-of-month month day-of-week).

    Raises:
        ValueError: If the expression does not have five fields or a field is invalid
    """
    fields = (expression or "").split()
    if len(fields) != 5:
        raise ValueError(f"Cron expression must have 5 fields: {expression!r}")

    minute, hour, day_of_month, month_of_year, day_of_week = fields
    return crontab(
        minute=minute,
        hour=hour,
        day_of_month=day_of_month,
        month_of_year=month_of_year,
        day_of_week=day_of_week,
        nowfun=nowfun,
        app=celery_app,
    )


def reminder_cron_settings() -> dict:
    """Named reminder schedules from settings; an empty expression disables one"""
    schedules = {
        "daily": settings.REMINDER_DAILY_CRON,
        "frequent": settings.REMINDER_FREQUENT_CRON,
    }
    return {name: expression for name, expression in schedules.items() if expression and expression.strip()}


celery_app.conf.beat_schedule = {
    f"check-due-reminders-{name}": {
        "task": "check_due_reminders",
        "schedule": parse_cron(expression),
    }
    for name, expression in reminder_cron_settings().items()
}
