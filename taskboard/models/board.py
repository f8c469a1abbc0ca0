"""
Board Model
Shared task collection; the unit of membership and permission scoping
"""

from sqlalchemy import Column, String, Text, ForeignKey, Table, Index
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from taskboard.core.database import Base
from taskboard.models.base import SoftDeleteModel


board_members = Table(
    "board_members",
    Base.metadata,
    Column("board_id", UUID(as_uuid=True), ForeignKey("boards.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Board(SoftDeleteModel):
    """Board belonging to exactly one workspace"""
    __tablename__ = "boards"

    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    background = Column(String(255), nullable=True)

    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    owner = relationship("User", foreign_keys=[owner_id])

    # Set at creation and never reassigned
    workspace_id = Column(UUID(as_uuid=True), ForeignKey("workspaces.id"), nullable=False, index=True)
    workspace = relationship("Workspace", back_populates="boards")

    members = relationship("User", secondary=board_members, lazy="selectin")
    lists = relationship("BoardList", back_populates="board", lazy="noload")

    __table_args__ = (
        Index('ix_board_workspace_deleted', 'workspace_id', 'is_deleted'),
    )

    def __repr__(self):
        return f"<Board(title='{self.title}')>"
