"""
List Repository
"""

from taskboard.models.board_list import BoardList
from taskboard.repositories.base import CRUDBase


class BoardListRepository(CRUDBase[BoardList]):
    """Repository for list database operations"""


board_list_repository = BoardListRepository(BoardList)
