"""
Card Repository
Card lookups and due-date queries for reminders
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from taskboard.models.board_list import BoardList
from taskboard.models.card import Card, card_members
from taskboard.repositories.base import CRUDBase, LookupFailedError

logger = structlog.get_logger()


class CardRepository(CRUDBase[Card]):
    """Repository for card database operations"""

    async def create_in_list(
        self,
        db: AsyncSession,
        board_list: BoardList,
        obj_in_data: Dict[str, Any],
        commit: bool = True,
    ) -> Card:
        """Create a card in a list; the card's board is always the list's board"""
        data = dict(obj_in_data)
        data.pop("board_id", None)
        data["list_id"] = board_list.id
        data["board_id"] = board_list.board_id
        return await self.create(db, obj_in_data=data, commit=commit)

    async def get_with_board(
        self,
        db: AsyncSession,
        card_id: UUID,
        include_deleted: bool = True,
    ) -> Optional[Card]:
        """Get a card with members and its board loaded"""
        query = (
            self._base_query(include_deleted)
            .where(Card.id == card_id)
            .options(selectinload(Card.members), selectinload(Card.board))
        )
        return await self._fetch_one(db, query, id=card_id)

    def due_for_user_query(
        self,
        user_id: UUID,
        start: datetime,
        end: datetime,
        include_completed: bool,
    ):
        """Cards the user is a member of with start <= due_date <= end"""
        query = (
            select(Card)
            .join(card_members, card_members.c.card_id == Card.id)
            .where(
                card_members.c.user_id == user_id,
                Card.is_deleted == False,
                Card.due_date.is_not(None),
                Card.due_date >= start,
                Card.due_date <= end,
            )
        )
        if not include_completed:
            query = query.where(Card.completed == False)
        return query.order_by(Card.completed.asc(), Card.due_date.asc())

    def due_in_window_query(self, start: datetime, end: datetime):
        """Open cards of any user with start <= due_date <= end"""
        return (
            select(Card)
            .where(
                Card.is_deleted == False,
                Card.completed == False,
                Card.due_date.is_not(None),
                Card.due_date >= start,
                Card.due_date <= end,
            )
            .options(selectinload(Card.members), selectinload(Card.board))
            .order_by(Card.due_date.asc())
        )

    async def get_due_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        start: datetime,
        end: datetime,
        include_completed: bool = True,
    ) -> List[Card]:
        query = self.due_for_user_query(user_id, start, end, include_completed)
        return await self._fetch_all(db, query)

    async def get_due_in_window(self, db: AsyncSession, start: datetime, end: datetime) -> List[Card]:
        return await self._fetch_all(db, self.due_in_window_query(start, end))

    async def _fetch_all(self, db: AsyncSession, query) -> List[Card]:
        try:
            result = await db.execute(query)
            cards = list(result.scalars().unique().all())
        except SQLAlchemyError as e:
            logger.error("Error querying due cards", error=str(e))
            raise LookupFailedError(Card.__name__, cause=e) from e

        logger.debug("Due cards retrieved", count=len(cards))
        return cards


card_repository = CardRepository(Card)
