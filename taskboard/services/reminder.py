"""
Reminder Service
Finds cards with an approaching due date and notifies their members
"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from typing import Callable, List, Optional, Union
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.core.config import settings
from taskboard.core.database import AsyncSessionLocal
from taskboard.core.metrics import REMINDERS_TOTAL
from taskboard.core.references import parse_id
from taskboard.models.card import Card
from taskboard.models.notification import NotificationType
from taskboard.repositories.card import card_repository
from taskboard.repositories.due_reminder import due_reminder_repository
from taskboard.schemas.access import CardSnapshot
from taskboard.services.notification import NotificationDispatchError, notification_service

logger = structlog.get_logger()

MIN_DAYS_AHEAD = 1


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DueWindow:
    """Closed interval [start, end] of due timestamps"""
    start: datetime
    end: datetime

    @classmethod
    def ahead(cls, now: datetime, span: timedelta) -> "DueWindow":
        return cls(start=now, end=now + span)

    def contains(self, moment: Optional[datetime]) -> bool:
        if moment is None:
            return False
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return self.start <= moment <= self.end


@dataclass
class SweepResult:
    cards_scanned: int = 0
    notifications_sent: int = 0
    skipped: int = 0
    failed: int = 0
    skipped_overlap: bool = False

    def to_dict(self) -> dict:
        return {
            "cards_scanned": self.cards_scanned,
            "notifications_sent": self.notifications_sent,
            "skipped": self.skipped,
            "failed": self.failed,
            "skipped_overlap": self.skipped_overlap,
        }


class ReminderService:
    """Due-date reminder queries and dispatch"""

    def __init__(
        self,
        session_factory=AsyncSessionLocal,
        cards=card_repository,
        reminder_logs=due_reminder_repository,
        notifier=notification_service,
        clock: Callable[[], datetime] = _utcnow,
        window_hours: Optional[int] = None,
        max_days_ahead: Optional[int] = None,
        tz=None,
    ):
        self.session_factory = session_factory
        self.cards = cards
        self.reminder_logs = reminder_logs
        self.notifier = notifier
        self.clock = clock
        self.window_hours = window_hours or settings.REMINDER_WINDOW_HOURS
        self.max_days_ahead = max_days_ahead or settings.REMINDER_MAX_DAYS_AHEAD
        self.tz = tz or settings.reminder_tz

    def clamp_days_ahead(self, days_ahead) -> int:
        try:
            days = int(days_ahead)
        except (TypeError, ValueError):
            days = MIN_DAYS_AHEAD
        return max(MIN_DAYS_AHEAD, min(days, self.max_days_ahead))

    def reminder_window(self) -> DueWindow:
        return DueWindow.ahead(self.clock(), timedelta(hours=self.window_hours))

    def local_date(self, moment: datetime) -> date:
        """Calendar date of a moment in the reminder time zone"""
        return moment.astimezone(self.tz).date()

    async def get_cards_due_for_user(
        self,
        db: AsyncSession,
        user_id: UUID,
        days_ahead: int = 1,
        include_completed: bool = True,
    ) -> List[Card]:
        """Cards the user belongs to that fall due within the next days_ahead days"""
        days = self.clamp_days_ahead(days_ahead)
        window = DueWindow.ahead(self.clock(), timedelta(days=days))
        cards = await self.cards.get_due_for_user(
            db,
            user_id,
            window.start,
            window.end,
            include_completed=include_completed,
        )
        logger.debug(
            "Upcoming cards for user",
            user_id=str(user_id),
            days=days,
            include_completed=include_completed,
            count=len(cards),
        )
        return cards

    async def check_due_reminders(self) -> SweepResult:
        """
        Notify every member of every open card due within the reminder window.

        Each member is reminded at most once per card per calendar day. A
        card that fails is counted and logged; the sweep moves on.
        """
        window = self.reminder_window()
        today = self.local_date(window.start)
        result = SweepResult()

        async with self.session_factory() as db:
            cards = await self.cards.get_due_in_window(db, window.start, window.end)
            snapshots = [CardSnapshot.from_model(card) for card in cards]

        result.cards_scanned = len(snapshots)
        logger.info(
            "Reminder sweep started",
            cards=result.cards_scanned,
            window_start=window.start.isoformat(),
            window_end=window.end.isoformat(),
        )

        for card in snapshots:
            if not card.member_ids:
                continue
            try:
                async with self.session_factory() as db:
                    await self._remind_members(db, card, today, result)
            except Exception as e:
                result.failed += 1
                logger.error("Reminder dispatch failed for card", card_id=str(card.id), error=str(e))

        REMINDERS_TOTAL.labels(outcome="sent").inc(result.notifications_sent)
        REMINDERS_TOTAL.labels(outcome="skipped").inc(result.skipped)
        REMINDERS_TOTAL.labels(outcome="failed").inc(result.failed)
        logger.info("Reminder sweep finished", **result.to_dict())
        return result

    async def send_immediate_due_reminder(self, card_id: Union[UUID, str]) -> bool:
        """
        Remind every member of one card now, ignoring the per-day limit.

        Returns False when the card cannot be reminded about or any dispatch
        fails.
        """
        parsed_id = parse_id(card_id)
        if parsed_id is None:
            logger.info("Manual reminder rejected", card_id=str(card_id), reason="invalid id")
            return False

        window = self.reminder_window()
        try:
            async with self.session_factory() as db:
                card = await self.cards.get_with_board(db, parsed_id, include_deleted=True)
                if card is None:
                    logger.info("Manual reminder rejected", card_id=str(parsed_id), reason="not found")
                    return False

                snapshot = CardSnapshot.from_model(card)
                reason = self._not_remindable_reason(snapshot, window)
                if reason:
                    logger.info("Manual reminder rejected", card_id=str(parsed_id), reason=reason)
                    return False

                for member_id in sorted(snapshot.member_ids, key=str):
                    await self.notifier.create_notification(
                        db,
                        recipient_id=member_id,
                        sender_id=snapshot.created_by_id or member_id,
                        notification_type=NotificationType.CARD_DUE_REMINDER,
                        message=self._manual_message(snapshot),
                        related_board_id=snapshot.board_id,
                        related_card_id=snapshot.id,
                    )
        except Exception as e:
            logger.error("Manual reminder failed", card_id=str(parsed_id), error=str(e))
            return False

        logger.info("Manual reminder sent", card_id=str(parsed_id), recipients=len(snapshot.member_ids))
        return True

    def _not_remindable_reason(self, card: CardSnapshot, window: DueWindow) -> Optional[str]:
        if card.is_deleted:
            return "deleted"
        if card.completed:
            return "completed"
        if card.due_date is None:
            return "no due date"
        if not window.contains(card.due_date):
            return "not due soon"
        if not card.member_ids:
            return "no members"
        return None

    async def _remind_members(self, db: AsyncSession, card: CardSnapshot, today: date, result: SweepResult) -> None:
        for member_id in sorted(card.member_ids, key=str):
            claim = await self.reminder_logs.claim(db, card.id, member_id, today)
            if claim is None:
                result.skipped += 1
                continue

            claim_id = claim.id
            try:
                notification = await self.notifier.create_notification(
                    db,
                    recipient_id=member_id,
                    sender_id=card.created_by_id or member_id,
                    notification_type=NotificationType.CARD_DUE_REMINDER,
                    message=self._due_message(card),
                    related_board_id=card.board_id,
                    related_card_id=card.id,
                )
            except NotificationDispatchError:
                await self.reminder_logs.release(db, claim_id)
                raise

            await self.reminder_logs.attach_notification(db, claim, notification.id)
            result.notifications_sent += 1
            logger.debug("Due reminder sent", card_id=str(card.id), recipient_id=str(member_id))

    def _format_due(self, due: datetime) -> str:
        return due.astimezone(self.tz).strftime("%Y-%m-%d %H:%M")

    def _due_message(self, card: CardSnapshot) -> str:
        return f'Card "{card.title}" is due at {self._format_due(card.due_date)}'

    def _manual_message(self, card: CardSnapshot) -> str:
        return f'Reminder: card "{card.title}" is due at {self._format_due(card.due_date)}'


reminder_service = ReminderService()
