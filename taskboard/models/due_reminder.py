"""
Due Reminder Log Model
One row per card, recipient and calendar day a due reminder was sent
"""

from sqlalchemy import Column, Date, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from taskboard.models.base import BaseModel


class DueReminderLog(BaseModel):
    """Idempotency record for the reminder sweep"""
    __tablename__ = "due_reminder_logs"

    card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    reminder_date = Column(Date, nullable=False)
    notification_id = Column(
        UUID(as_uuid=True), ForeignKey("notifications.id", ondelete="SET NULL"), nullable=True
    )

    __table_args__ = (
        UniqueConstraint('card_id', 'recipient_id', 'reminder_date', name='uq_due_reminder_per_day'),
    )

    def __repr__(self):
        return f"<DueReminderLog(card_id='{self.card_id}', date='{self.reminder_date}')>"
