"""
Reminder Schemas
Upcoming due cards and sweep results
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID
from pydantic import BaseModel, Field

from taskboard.schemas.base import BaseResponseSchema


class DueCardResponse(BaseResponseSchema):
    """Card with a due date inside the requested window"""
    title: str = Field(..., description="Card title")
    board_id: UUID = Field(..., description="Owning board")
    list_id: UUID = Field(..., description="Owning list")
    due_date: Optional[datetime] = Field(None, description="Due timestamp")
    completed: bool = Field(False, description="Completion flag")


class UpcomingCardsResponse(BaseModel):
    """Cards due for the current user"""
    cards: List[DueCardResponse] = Field(default_factory=list, description="Due cards")
    count: int = Field(..., description="Number of cards returned")
    days: int = Field(..., description="Window size in days after clamping")
    message: str = Field(..., description="Human readable summary")


class SweepResultResponse(BaseModel):
    """Outcome of one reminder sweep"""
    cards_scanned: int = Field(0, description="Due cards examined")
    notifications_sent: int = Field(0, description="Reminders dispatched")
    skipped: int = Field(0, description="Recipients already reminded today")
    failed: int = Field(0, description="Cards or recipients whose dispatch failed")
    skipped_overlap: bool = Field(False, description="True when another sweep was already running")
