"""
SQLAlchemy Models Package
Taskboard Database Models
"""

from taskboard.models.user import User
from taskboard.models.workspace import Workspace, workspace_members
from taskboard.models.board import Board, board_members
from taskboard.models.board_list import BoardList
from taskboard.models.card import Card, card_members
from taskboard.models.notification import Notification, NotificationType
from taskboard.models.due_reminder import DueReminderLog

__all__ = [
    "User",
    "Workspace",
    "workspace_members",
    "Board",
    "board_members",
    "BoardList",
    "Card",
    "card_members",
    "Notification",
    "NotificationType",
    "DueReminderLog",
]
