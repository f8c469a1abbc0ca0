"""
Board Access Endpoints
Report the caller's effective role on a board, list or card
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from taskboard.core.database import get_db
from taskboard.core.deps import get_current_user
from taskboard.models.user import User
from taskboard.schemas.access import AccessResponse
from taskboard.services.board_access import board_access_service

logger = structlog.get_logger()
router = APIRouter()


# Path ids are taken as plain strings so malformed ids are reported as
# "invalid id" rather than rejected by request validation.

@router.get("/boards/{board_id}/access", response_model=AccessResponse)
async def get_board_access(
    board_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Effective role of the current user on a board"""
    access = await board_access_service.resolve_via_board(db, board_id, current_user.id)
    return AccessResponse.from_access(access)


@router.get("/lists/{list_id}/access", response_model=AccessResponse)
async def get_list_access(
    list_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Effective role of the current user on the board owning a list"""
    access = await board_access_service.resolve_via_list(db, list_id, current_user.id)
    return AccessResponse.from_access(access)


@router.get("/cards/{card_id}/access", response_model=AccessResponse)
async def get_card_access(
    card_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Effective role of the current user on the board owning a card"""
    access = await board_access_service.resolve_via_card(db, card_id, current_user.id)
    return AccessResponse.from_access(access)
