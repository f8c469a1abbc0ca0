"""
Reminder Endpoints
Upcoming due cards, manual sweeps and manual reminders
"""

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from taskboard.core.board_roles import BoardRole
from taskboard.core.database import get_db
from taskboard.core.deps import get_current_superuser, get_current_user, require_board_permission
from taskboard.models.user import User
from taskboard.repositories.base import LookupFailedError
from taskboard.schemas.access import CardAccess
from taskboard.schemas.base import SuccessResponse
from taskboard.schemas.reminder import DueCardResponse, SweepResultResponse, UpcomingCardsResponse
from taskboard.services.reminder import reminder_service
from taskboard.services.reminder_scheduler import reminder_scheduler

logger = structlog.get_logger()
router = APIRouter()


@router.get("/upcoming", response_model=UpcomingCardsResponse)
async def get_upcoming_cards(
    days: int = Query(1, description="Days ahead to look (clamped to the allowed range)"),
    include_completed: bool = Query(True, description="Include completed cards"),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Cards assigned to the current user that fall due soon"""
    clamped_days = reminder_service.clamp_days_ahead(days)
    try:
        cards = await reminder_service.get_cards_due_for_user(
            db,
            current_user.id,
            days_ahead=clamped_days,
            include_completed=include_completed,
        )
    except LookupFailedError as e:
        logger.error("Upcoming cards lookup failed", user_id=str(current_user.id), error=str(e))
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not load upcoming cards"
        )

    return UpcomingCardsResponse(
        cards=[DueCardResponse.model_validate(card) for card in cards],
        count=len(cards),
        days=clamped_days,
        message=f"Found {len(cards)} cards due in the next {clamped_days} day(s)",
    )


@router.post("/check", response_model=SweepResultResponse)
async def trigger_reminder_check(
    current_user: User = Depends(get_current_superuser),
):
    """Run one reminder sweep now (admin only)"""
    logger.info("Manual reminder sweep requested", user_id=str(current_user.id))
    result = await reminder_scheduler.run_immediately()
    return SweepResultResponse(**result.to_dict())


@router.post("/send/{card_id}", response_model=SuccessResponse)
async def send_card_reminder(
    card_id: str,
    access: CardAccess = Depends(require_board_permission(BoardRole.EDITOR)),
):
    """Remind every member of a card now"""
    sent = await reminder_service.send_immediate_due_reminder(card_id)
    if not sent:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Card is not eligible for a due reminder"
        )

    return SuccessResponse(
        message="Due reminder sent",
        data={"card_id": card_id, "board_id": str(access.board.id)},
    )
