"""Read side: assembles boards, columns, cards and comment threads into views.

Each level issues its own queries (columns per board, cards per column,
comments per card). Nothing is read inside a shared transaction, so a board
read while cards are being moved may show a card in two columns or in none.
Missing children simply produce empty lists.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from . import threads
from .db import Board, Card
from .errors import NotFoundError
from .pagination import PageRequest
from .schemas import (
    BoardOut,
    BoardView,
    CardDetailContent,
    CardItem,
    CardSummaryContent,
    Category,
    ColumnView,
)
from .storage import KanbanStore

logger = logging.getLogger(__name__)


class CardAssembler:
    def __init__(self, store: KanbanStore, avatar_base_url: str = threads.DEFAULT_AVATAR_BASE_URL) -> None:
        self.store = store
        self.avatar_base_url = avatar_base_url

    def assemble(
        self,
        column_id: str,
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        detail: bool = False,
    ) -> List[CardItem]:
        """Cards of one column ordered by title.

        ``limit``/``offset`` page this column only. In detail mode every card
        carries its comment thread, otherwise just the top-level comment count.
        """
        cards = self.store.list_cards(column_id, limit=limit, offset=offset)
        return [self._card_item(card, detail) for card in cards]

    def _card_item(self, card: Card, detail: bool) -> CardItem:
        comments = self.store.list_comments(card.id)
        fields = dict(
            title=card.title,
            description=card.description,
            category=Category(label=card.category_title, color=card.category_color),
            priority=card.priority,
            status=card.status,
            likes=card.likes,
            commentCount=threads.comment_count(comments),
        )
        if detail:
            content = CardDetailContent(
                **fields, comments=threads.build_thread(comments, self.avatar_base_url)
            )
        else:
            content = CardSummaryContent(**fields)
        return CardItem(id=card.id, content=content)


class ColumnAssembler:
    def __init__(self, store: KanbanStore, cards: CardAssembler) -> None:
        self.store = store
        self.cards = cards

    def assemble(
        self,
        board_id: str,
        *,
        limit: Optional[int] = None,
        offset: int = 0,
        detail: bool = False,
    ) -> Tuple[List[ColumnView], int]:
        """Columns of a board ordered by ``order`` then id, plus the board-wide card total.

        The total counts every card on the board regardless of paging.
        """
        columns = [
            ColumnView(
                id=column.id,
                name=column.name,
                disableAdd=column.disable_add,
                order=column.order,
                items=self.cards.assemble(column.id, limit=limit, offset=offset, detail=detail),
            )
            for column in self.store.list_columns(board_id)
        ]
        return columns, self.store.count_cards_for_board(board_id)


class BoardAggregateService:
    """Board list and board detail reads."""

    def __init__(self, store: KanbanStore, avatar_base_url: str = threads.DEFAULT_AVATAR_BASE_URL) -> None:
        self.store = store
        self.columns = ColumnAssembler(store, CardAssembler(store, avatar_base_url))

    def _board_view(self, board: Board, page: PageRequest, detail: bool) -> Tuple[BoardView, int]:
        columns, total_cards = self.columns.assemble(
            board.id, limit=page.size, offset=page.offset, detail=detail
        )
        return BoardView(id=board.id, name=board.name, kanbanColumns=columns), total_cards

    def list_boards_full(
        self,
        page: PageRequest,
        search: Optional[str] = None,
    ) -> Tuple[List[BoardView], int]:
        """Fully assembled boards ordered by name, paged at board level.

        Returns the page of boards and the number of boards matching ``search``.
        Cards inside each board are not paged.
        """
        total = self.store.count_boards(search)
        boards = self.store.list_boards(search, limit=page.size, offset=page.offset)
        views = [self._board_view(board, PageRequest(), detail=False)[0] for board in boards]
        return views, total

    def list_boards(self, page: PageRequest) -> Tuple[List[BoardOut], int]:
        total = self.store.count_boards()
        boards = self.store.list_boards(limit=page.size, offset=page.offset)
        return [BoardOut(id=b.id, name=b.name) for b in boards], total

    def get_board(self, board_id: str) -> BoardOut:
        board = self.store.get_board(board_id)
        if board is None:
            raise NotFoundError("Board not found")
        return BoardOut(id=board.id, name=board.name)

    def get_board_detail(self, board_id: str, page: PageRequest) -> Tuple[BoardView, int]:
        """One board with comment threads; ``page`` applies to each column's cards."""
        board = self.store.get_board(board_id)
        if board is None:
            raise NotFoundError("Kanban board not found")
        view, total_cards = self._board_view(board, page, detail=True)
        logger.debug(
            "board_assembled board_id=%s columns=%s total_cards=%s",
            board_id,
            len(view.kanbanColumns),
            total_cards,
        )
        return view, total_cards
