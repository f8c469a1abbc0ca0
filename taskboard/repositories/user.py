"""
User Repository
Lookups of authenticated accounts
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.models.user import User
from taskboard.repositories.base import CRUDBase

logger = structlog.get_logger()


class UserRepository(CRUDBase[User]):
    async def get_active(self, db: AsyncSession, user_id: UUID) -> Optional[User]:
        query = self._base_query(include_deleted=False).where(
            User.id == user_id,
            User.is_active == True,
        )
        return await self._fetch_one(db, query, id=user_id)


user_repository = UserRepository(User)
