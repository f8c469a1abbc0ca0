"""
Reminder Background Tasks
Celery tasks that run the due-reminder sweep for beat-driven deployments
"""

import asyncio

import structlog

from taskboard.core.celery_app import celery_app

logger = structlog.get_logger()


async def _sweep() -> dict:
    from taskboard.core.database import engine
    from taskboard.services.reminder import reminder_service

    try:
        result = await reminder_service.check_due_reminders()
    finally:
        # Pooled connections are bound to this event loop
        await engine.dispose()
    return result.to_dict()


@celery_app.task(bind=True, name="check_due_reminders", max_retries=1)
def check_due_reminders_task(self):
    """
    Run one reminder sweep.

    Celery workers don't run an asyncio event loop, so the async sweep is
    driven with asyncio.run.
    """
    logger.info("Background reminder sweep started", task_id=self.request.id)

    try:
        result = asyncio.run(_sweep())
    except Exception as e:
        logger.error("Background reminder sweep failed", task_id=self.request.id, error=str(e))
        return {"status": "failed", "error": str(e)}

    logger.info("Background reminder sweep completed", task_id=self.request.id, **result)
    return {"status": "completed", **result}
