"""
Tests for repositories
Query shape, lookup failure wrapping and reminder claims
"""

from datetime import date, datetime, timedelta, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from taskboard.models.card import Card
from taskboard.models.due_reminder import DueReminderLog
from taskboard.repositories.base import LookupFailedError
from taskboard.repositories.board import board_repository
from taskboard.repositories.card import CardRepository, card_repository
from taskboard.repositories.due_reminder import due_reminder_repository


NOW = datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)


class TestLookupFailures:

    @pytest.mark.asyncio
    async def test_store_errors_become_lookup_failed(self, mock_db):
        mock_db.execute.side_effect = OperationalError("SELECT 1", {}, Exception("connection refused"))
        board_id = uuid4()

        with pytest.raises(LookupFailedError) as exc_info:
            await board_repository.get_with_workspace(mock_db, board_id)

        assert exc_info.value.model == "Board"
        assert exc_info.value.id == board_id
        assert isinstance(exc_info.value.cause, OperationalError)

    @pytest.mark.asyncio
    async def test_missing_row_is_none(self, mock_db):
        result = MagicMock()
        result.scalar_one_or_none.return_value = None
        mock_db.execute.return_value = result

        assert await board_repository.get_with_workspace(mock_db, uuid4()) is None

    @pytest.mark.asyncio
    async def test_due_query_errors_become_lookup_failed(self, mock_db):
        mock_db.execute.side_effect = OperationalError("SELECT", {}, Exception("timeout"))

        with pytest.raises(LookupFailedError):
            await card_repository.get_due_in_window(mock_db, NOW, NOW + timedelta(hours=24))


class TestCardQueries:

    def test_due_for_user_filters(self):
        query = card_repository.due_for_user_query(uuid4(), NOW, NOW + timedelta(days=1), include_completed=True)
        where = str(query.whereclause)

        assert "card_members.user_id" in where
        assert "cards.is_deleted" in where
        assert "cards.due_date >=" in where
        assert "cards.due_date <=" in where
        assert "cards.completed" not in where

    def test_due_for_user_can_exclude_completed(self):
        query = card_repository.due_for_user_query(uuid4(), NOW, NOW + timedelta(days=1), include_completed=False)
        assert "cards.completed" in str(query.whereclause)

    def test_due_for_user_orders_incomplete_first(self):
        query = card_repository.due_for_user_query(uuid4(), NOW, NOW + timedelta(days=1), include_completed=True)
        order = [str(clause) for clause in query._order_by_clauses]
        assert order == ["cards.completed ASC", "cards.due_date ASC"]

    def test_due_in_window_excludes_completed_and_deleted(self):
        where = str(card_repository.due_in_window_query(NOW, NOW + timedelta(hours=24)).whereclause)
        assert "cards.completed" in where
        assert "cards.is_deleted" in where
        assert "cards.due_date IS NOT NULL" in where

    @pytest.mark.asyncio
    async def test_get_due_for_user_returns_unique_cards(self, mock_db):
        cards = [SimpleNamespace(id=uuid4()), SimpleNamespace(id=uuid4())]
        result = MagicMock()
        result.scalars.return_value.unique.return_value.all.return_value = cards
        mock_db.execute.return_value = result

        found = await card_repository.get_due_for_user(mock_db, uuid4(), NOW, NOW + timedelta(days=1))

        assert found == cards


class TestCreateInList:

    @pytest.mark.asyncio
    async def test_board_comes_from_list(self, mock_db):
        repository = CardRepository(Card)
        repository.create = AsyncMock(side_effect=lambda db, obj_in_data, commit=True: obj_in_data)
        board_list = SimpleNamespace(id=uuid4(), board_id=uuid4())

        data = await repository.create_in_list(
            mock_db,
            board_list,
            {"title": "Ship it", "board_id": uuid4()},
        )

        assert data["list_id"] == board_list.id
        assert data["board_id"] == board_list.board_id
        assert data["title"] == "Ship it"


class TestReminderClaims:

    @pytest.mark.asyncio
    async def test_claim_inserts_row(self, mock_db):
        card_id, recipient_id = uuid4(), uuid4()

        claim = await due_reminder_repository.claim(mock_db, card_id, recipient_id, date(2026, 3, 2))

        assert isinstance(claim, DueReminderLog)
        assert claim.card_id == card_id
        assert claim.recipient_id == recipient_id
        assert claim.reminder_date == date(2026, 3, 2)
        mock_db.commit.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_duplicate_claim_is_none(self, mock_db):
        mock_db.commit.side_effect = IntegrityError("INSERT", {}, Exception("uq_due_reminder_per_day"))

        claim = await due_reminder_repository.claim(mock_db, uuid4(), uuid4(), date(2026, 3, 2))

        assert claim is None
        mock_db.rollback.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_release_deletes_claim(self, mock_db):
        claim_id = uuid4()

        await due_reminder_repository.release(mock_db, claim_id)

        mock_db.execute.assert_awaited_once()
        statement = mock_db.execute.await_args.args[0]
        assert statement.table.name == "due_reminder_logs"
        assert statement.whereclause.right.value == claim_id
        mock_db.commit.assert_awaited_once()

    def test_unique_per_card_recipient_day(self):
        constraints = {c.name: c for c in DueReminderLog.__table__.constraints}
        unique = constraints["uq_due_reminder_per_day"]
        assert [col.name for col in unique.columns] == ["card_id", "recipient_id", "reminder_date"]
