from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import case, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .db import Board, Card, ColumnModel, Comment, User
from .errors import StoreError

logger = logging.getLogger(__name__)


@dataclass
class CommentRecord:
    """A comment row joined with the display fields of its author."""

    id: str
    text: str
    user_id: str
    card_id: str
    reply_for_comment_id: Optional[str]
    created_at: Optional[datetime]
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    username: Optional[str] = None


def new_id() -> str:
    return str(uuid.uuid4())


class KanbanStore:
    """Entity store for boards, columns, cards and comments.

    Wraps a single SQLAlchemy session; one store is created per request.
    Writes are staged with ``add``/``delete`` and made durable by ``commit``.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    # === Unit of work ===
    def commit(self) -> None:
        try:
            self.session.commit()
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("commit_failed")
            raise StoreError(str(exc)) from exc

    def delete(self, entity: Any) -> None:
        self.session.delete(entity)

    def apply(self, entity: Any, changes: Dict[str, Any]) -> None:
        for attr, value in changes.items():
            setattr(entity, attr, value)

    def refresh(self, entity: Any) -> None:
        self.session.refresh(entity)

    # === Board operations ===
    def add_board(self, name: str) -> Board:
        board = Board(id=new_id(), name=name)
        self.session.add(board)
        return board

    def get_board(self, board_id: str) -> Optional[Board]:
        return self.session.get(Board, board_id)

    def _board_filter(self, stmt, search: Optional[str]):
        if search:
            stmt = stmt.where(func.lower(Board.name).contains(search.lower(), autoescape=True))
        return stmt

    def list_boards(
        self,
        search: Optional[str] = None,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Board]:
        stmt = self._board_filter(select(Board), search).order_by(Board.name, Board.id)
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.session.scalars(stmt))

    def count_boards(self, search: Optional[str] = None) -> int:
        stmt = self._board_filter(select(func.count()).select_from(Board), search)
        return self.session.scalar(stmt) or 0

    # === Column operations ===
    def add_column(self, board_id: str, name: str, disable_add: bool, order: int) -> ColumnModel:
        column = ColumnModel(
            id=new_id(),
            board_id=board_id,
            name=name,
            disable_add=disable_add,
            order=order,
        )
        self.session.add(column)
        return column

    def get_column(self, column_id: str) -> Optional[ColumnModel]:
        return self.session.get(ColumnModel, column_id)

    def list_columns(self, board_id: str) -> List[ColumnModel]:
        stmt = (
            select(ColumnModel)
            .where(ColumnModel.board_id == board_id)
            .order_by(ColumnModel.order, ColumnModel.id)
        )
        return list(self.session.scalars(stmt))

    # === Card operations ===
    def add_card(self, column_id: str, title: str, **fields: Any) -> Card:
        card = Card(id=new_id(), column_id=column_id, title=title, likes=0, **fields)
        self.session.add(card)
        return card

    def get_card(self, card_id: str) -> Optional[Card]:
        return self.session.get(Card, card_id)

    def list_cards(
        self,
        column_id: str,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[Card]:
        stmt = select(Card).where(Card.column_id == column_id).order_by(Card.title, Card.id)
        if limit is not None:
            stmt = stmt.limit(limit).offset(offset)
        return list(self.session.scalars(stmt))

    def count_cards_for_board(self, board_id: str) -> int:
        stmt = (
            select(func.count(Card.id))
            .join(ColumnModel, Card.column_id == ColumnModel.id)
            .where(ColumnModel.board_id == board_id)
        )
        return self.session.scalar(stmt) or 0

    def adjust_likes(self, card_id: str, increment: bool) -> None:
        """Add or remove one like in a single UPDATE, never going below zero."""
        if increment:
            likes = Card.likes + 1
        else:
            likes = case((Card.likes > 0, Card.likes - 1), else_=0)
        self.session.execute(
            update(Card).where(Card.id == card_id).values(likes=likes),
            execution_options={"synchronize_session": False},
        )

    # === Comment operations ===
    def add_comment(
        self,
        card_id: str,
        user_id: str,
        text: str,
        reply_for_comment_id: Optional[str] = None,
    ) -> Comment:
        comment = Comment(
            id=new_id(),
            card_id=card_id,
            user_id=user_id,
            text=text,
            reply_for_comment_id=reply_for_comment_id,
        )
        self.session.add(comment)
        return comment

    def get_comment(self, comment_id: str) -> Optional[Comment]:
        return self.session.get(Comment, comment_id)

    def _comment_records(self, *criteria: Any) -> List[CommentRecord]:
        stmt = (
            select(Comment, User)
            .outerjoin(User, Comment.user_id == User.id)
            .where(*criteria)
            .order_by(Comment.created_at, Comment.id)
        )
        return [_to_record(comment, user) for comment, user in self.session.execute(stmt)]

    def list_comments(self, card_id: str) -> List[CommentRecord]:
        return self._comment_records(Comment.card_id == card_id)

    def list_replies(self, comment_id: str, card_id: str) -> List[CommentRecord]:
        return self._comment_records(
            Comment.reply_for_comment_id == comment_id, Comment.card_id == card_id
        )

    def delete_replies(self, comment_id: str) -> int:
        result = self.session.execute(
            delete(Comment).where(Comment.reply_for_comment_id == comment_id),
            execution_options={"synchronize_session": False},
        )
        return result.rowcount or 0


def _to_record(comment: Comment, user: Optional[User]) -> CommentRecord:
    return CommentRecord(
        id=comment.id,
        text=comment.text,
        user_id=comment.user_id,
        card_id=comment.card_id,
        reply_for_comment_id=comment.reply_for_comment_id,
        created_at=comment.created_at,
        firstname=user.firstname if user else None,
        lastname=user.lastname if user else None,
        username=user.username if user else None,
    )
