"""
Due Reminder Log Repository
Claim/release of the once-per-day reminder slot
"""

from datetime import date
from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.due_reminder import DueReminderLog
from taskboard.repositories.base import CRUDBase

logger = structlog.get_logger()


class DueReminderLogRepository(CRUDBase[DueReminderLog]):
    """Repository for reminder de-duplication records"""

    async def claim(
        self,
        db: AsyncSession,
        card_id: UUID,
        recipient_id: UUID,
        reminder_date: date,
    ) -> Optional[DueReminderLog]:
        """
        Insert the reminder slot for (card, recipient, day).

        Returns the new row, or None when another sweep already holds the
        slot. The unique constraint makes this safe across processes.
        """
        log = DueReminderLog(card_id=card_id, recipient_id=recipient_id, reminder_date=reminder_date)
        db.add(log)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            logger.debug(
                "Reminder already claimed",
                card_id=str(card_id),
                recipient_id=str(recipient_id),
                reminder_date=reminder_date.isoformat(),
            )
            return None
        return log

    async def attach_notification(self, db: AsyncSession, log: DueReminderLog, notification_id: UUID) -> None:
        log.notification_id = notification_id
        db.add(log)
        await db.commit()

    async def release(self, db: AsyncSession, claim_id: UUID) -> None:
        """
        Drop a claim whose dispatch failed so a later sweep can retry.

        Takes the id, not the row: the failed dispatch rolled the session back,
        which expires every loaded row.
        """
        await db.execute(delete(DueReminderLog).where(DueReminderLog.id == claim_id))
        await db.commit()
        logger.info("Reminder claim released", claim_id=str(claim_id))


due_reminder_repository = DueReminderLogRepository(DueReminderLog)
