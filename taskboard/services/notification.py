"""
Notification Service
Persists notifications and pushes them to connected clients
"""

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.websocket import NotificationSocketManager, notification_sockets
from taskboard.models.notification import Notification, NotificationType
from taskboard.repositories.notification import notification_repository

logger = structlog.get_logger()


class NotificationDispatchError(Exception):
    """A notification could not be stored"""

    def __init__(self, recipient_id: UUID, notification_type: str, cause: Optional[BaseException] = None):
        self.recipient_id = recipient_id
        self.notification_type = notification_type
        self.cause = cause
        super().__init__(f"Failed to create {notification_type} notification for {recipient_id}")


class NotificationService:
    """Service for creating and delivering notifications"""

    def __init__(self, repository=notification_repository, sockets: NotificationSocketManager = notification_sockets):
        self.repository = repository
        self.sockets = sockets

    async def create_notification(
        self,
        db: AsyncSession,
        recipient_id: UUID,
        sender_id: UUID,
        notification_type: NotificationType,
        message: str,
        related_workspace_id: Optional[UUID] = None,
        related_board_id: Optional[UUID] = None,
        related_card_id: Optional[UUID] = None,
    ) -> Notification:
        """
        Store a notification and push it to the recipient's open sockets.

        Raises:
            NotificationDispatchError: If the notification could not be stored
        """
        type_value = NotificationType(notification_type).value
        data = {
            "recipient_id": recipient_id,
            "sender_id": sender_id,
            "type": type_value,
            "message": message,
            "related_workspace_id": related_workspace_id,
            "related_board_id": related_board_id,
            "related_card_id": related_card_id,
        }

        try:
            notification = await self.repository.create(db, obj_in_data=data)
        except SQLAlchemyError as e:
            raise NotificationDispatchError(recipient_id, type_value, cause=e) from e

        try:
            await self.sockets.send_to_user(str(recipient_id), notification.to_payload())
        except Exception as e:
            # The stored row is the record of delivery; push is best effort
            logger.warning(
                "Notification push failed",
                notification_id=str(notification.id),
                recipient_id=str(recipient_id),
                error=str(e),
            )

        logger.info(
            "Notification created",
            notification_id=str(notification.id),
            recipient_id=str(recipient_id),
            type=type_value,
        )
        return notification


notification_service = NotificationService()
