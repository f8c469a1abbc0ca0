"""
Card Model
Task item with members, an optional due date and a completion flag
"""

from sqlalchemy import Column, String, Text, Boolean, DateTime, ForeignKey, Table, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from taskboard.core.database import Base
from taskboard.models.base import SoftDeleteModel


card_members = Table(
    "card_members",
    Base.metadata,
    Column("card_id", UUID(as_uuid=True), ForeignKey("cards.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Card(SoftDeleteModel):
    """Card in a list; board_id mirrors the list's board"""
    __tablename__ = "cards"

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    list_id = Column(UUID(as_uuid=True), ForeignKey("lists.id"), nullable=False, index=True)
    board_list = relationship("BoardList", back_populates="cards")

    # Denormalized from the list
    board_id = Column(UUID(as_uuid=True), ForeignKey("boards.id"), nullable=False, index=True)
    board = relationship("Board")

    due_date = Column(DateTime(timezone=True), nullable=True, index=True)
    completed = Column(Boolean, default=False, nullable=False)

    created_by_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=True)

    members = relationship("User", secondary=card_members, lazy="selectin")

    __table_args__ = (
        Index('ix_card_due_open', 'due_date', 'completed', 'is_deleted'),
    )

    def __repr__(self):
        return f"<Card(title='{self.title}', due_date='{self.due_date}')>"
