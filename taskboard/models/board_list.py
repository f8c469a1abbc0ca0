"""
List Model
Column of cards on a board
"""

from sqlalchemy import Column, String, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from taskboard.models.base import SoftDeleteModel


class BoardList(SoftDeleteModel):
    """List belonging to exactly one board"""
    __tablename__ = "lists"

    title = Column(String(255), nullable=False)

    board_id = Column(UUID(as_uuid=True), ForeignKey("boards.id"), nullable=False)
    board = relationship("Board", back_populates="lists")

    cards = relationship("Card", back_populates="board_list", lazy="noload")

    __table_args__ = (
        Index('ix_list_board_created', 'board_id', 'created_at'),
    )

    def __repr__(self):
        return f"<BoardList(title='{self.title}')>"
