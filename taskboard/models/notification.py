"""
Notification Model
In-app notifications delivered to users
"""

from sqlalchemy import Column, String, Text, Boolean, ForeignKey, Index
from sqlalchemy.dialects.postgresql import UUID
from taskboard.models.base import BaseModel
import enum


class NotificationType(str, enum.Enum):
    """Notification reasons"""
    WORKSPACE_INVITE = "workspace_invite"
    WORKSPACE_REMOVE = "workspace_remove"
    WORKSPACE_DELETED = "workspace_deleted"
    BOARD_INVITATION = "board_invitation"
    BOARD_MEMBER_ADDED = "board_member_added"
    BOARD_MEMBER_REMOVED = "board_member_removed"
    BOARD_MEMBER_LEFT = "board_member_left"
    BOARD_DELETED = "board_deleted"
    BOARD_SHARED = "board_shared"
    LIST_CREATED = "list_created"
    LIST_UPDATED = "list_updated"
    LIST_DELETED = "list_deleted"
    CARD_ASSIGNED = "card_assigned"
    CARD_MOVED = "card_moved"
    CARD_RENAMED = "card_renamed"
    CARD_DELETED = "card_deleted"
    CARD_COMMENT = "card_comment"
    CARD_DUE_REMINDER = "card_due_reminder"


class Notification(BaseModel):
    """Notification addressed to one recipient"""
    __tablename__ = "notifications"

    recipient_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False, index=True)
    sender_id = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)

    type = Column(String(50), nullable=False)
    message = Column(Text, nullable=False)

    related_workspace_id = Column(
        UUID(as_uuid=True), ForeignKey("workspaces.id", ondelete="SET NULL"), nullable=True
    )
    related_board_id = Column(UUID(as_uuid=True), ForeignKey("boards.id", ondelete="SET NULL"), nullable=True)
    related_card_id = Column(UUID(as_uuid=True), ForeignKey("cards.id", ondelete="SET NULL"), nullable=True)

    is_read = Column(Boolean, default=False, nullable=False, index=True)

    __table_args__ = (
        Index('ix_notification_recipient_read', 'recipient_id', 'is_read', 'created_at'),
    )

    def __repr__(self):
        return f"<Notification(type='{self.type}', recipient_id='{self.recipient_id}')>"

    def to_payload(self) -> dict:
        """JSON-ready representation pushed over WebSocket"""
        return {
            "id": str(self.id),
            "type": self.type,
            "message": self.message,
            "sender_id": str(self.sender_id),
            "related_workspace_id": str(self.related_workspace_id) if self.related_workspace_id else None,
            "related_board_id": str(self.related_board_id) if self.related_board_id else None,
            "related_card_id": str(self.related_card_id) if self.related_card_id else None,
            "is_read": bool(self.is_read),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
