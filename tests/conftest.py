"""
Shared fixtures for the taskboard test suite.
"""

import os
from datetime import datetime, timezone
from types import SimpleNamespace
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("REMINDER_TIMEZONE", "Asia/Ho_Chi_Minh")


# ── Row factories ───────────────────────────────────────────────
# Plain namespaces stand in for ORM rows; snapshots read them by attribute.


def make_user(**overrides):
    data = {"id": uuid4(), "email": "user@example.com", "is_active": True, "is_superuser": False}
    data.update(overrides)
    return SimpleNamespace(**data)


def make_workspace(owner_id, members=(), **overrides):
    data = {"id": uuid4(), "name": "Workspace", "owner_id": owner_id, "members": list(members)}
    data.update(overrides)
    return SimpleNamespace(**data)


def make_board(owner_id, workspace=None, workspace_id=None, members=(), **overrides):
    data = {
        "id": uuid4(),
        "title": "Board",
        "owner_id": owner_id,
        "workspace": workspace,
        "workspace_id": workspace.id if workspace is not None else (workspace_id or uuid4()),
        "members": list(members),
        "is_deleted": False,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


def make_list(board_id, **overrides):
    data = {"id": uuid4(), "title": "To do", "board_id": board_id, "is_deleted": False}
    data.update(overrides)
    return SimpleNamespace(**data)


def make_card(board_id, list_id=None, members=(), due_date=None, **overrides):
    data = {
        "id": uuid4(),
        "title": "Write report",
        "list_id": list_id or uuid4(),
        "board_id": board_id,
        "members": list(members),
        "due_date": due_date,
        "completed": False,
        "is_deleted": False,
        "created_by_id": None,
    }
    data.update(overrides)
    return SimpleNamespace(**data)


# ── Fixtures ────────────────────────────────────────────────────


@pytest.fixture
def mock_db():
    """Create a mock async database session"""
    db = AsyncMock()
    db.add = lambda obj: None
    db.commit = AsyncMock()
    db.rollback = AsyncMock()
    db.refresh = AsyncMock()
    return db


@pytest.fixture
def fixed_now():
    return datetime(2026, 3, 2, 1, 0, tzinfo=timezone.utc)  # 08:00 in Asia/Ho_Chi_Minh
