"""
Notification Repository
"""

from taskboard.models.notification import Notification
from taskboard.repositories.base import CRUDBase


class NotificationRepository(CRUDBase[Notification]):
    """Repository for notification database operations"""


notification_repository = NotificationRepository(Notification)
