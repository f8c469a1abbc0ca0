"""
Workspace Model
Container of boards with its own owner and member set
"""

from sqlalchemy import Column, String, Text, ForeignKey, Table
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship
from taskboard.core.database import Base
from taskboard.models.base import BaseModel


workspace_members = Table(
    "workspace_members",
    Base.metadata,
    Column("workspace_id", UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="CASCADE"), primary_key=True),
    Column("user_id", UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True),
)


class Workspace(BaseModel):
    """Workspace owning a set of boards"""
    __tablename__ = "workspaces"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    owner_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    owner = relationship("User", foreign_keys=[owner_id])

    members = relationship("User", secondary=workspace_members, lazy="selectin")
    boards = relationship("Board", back_populates="workspace", lazy="noload")

    def __repr__(self):
        return f"<Workspace(name='{self.name}')>"
