"""Write side: validated mutations on boards, columns, cards and comments.

Every operation checks its inputs and referenced rows before writing
anything, commits once, and returns the affected row read back from the store.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from . import threads
from .db import Board, Card, ColumnModel, Comment
from .errors import ConflictError, NotFoundError, ValidationError
from .models import Priority, Status
from .schemas import BoardOut, CardOut, ColumnOut, CommentOut, ReplyOut
from .storage import KanbanStore

logger = logging.getLogger(__name__)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _enum_value(value: Any) -> Any:
    return value.value if isinstance(value, (Priority, Status)) else value


def board_out(board: Board) -> BoardOut:
    return BoardOut(id=board.id, name=board.name)


def column_out(column: ColumnModel) -> ColumnOut:
    return ColumnOut(
        id=column.id,
        name=column.name,
        boardId=column.board_id,
        disableAdd=column.disable_add,
        order=column.order,
    )


def card_out(card: Card) -> CardOut:
    return CardOut(
        id=card.id,
        kanbanColumnId=card.column_id,
        title=card.title,
        description=card.description,
        categoryTitle=card.category_title,
        categoryColor=card.category_color,
        priority=card.priority,
        status=card.status,
        likes=card.likes,
    )


def comment_out(comment: Comment) -> CommentOut:
    return CommentOut(
        id=comment.id,
        text=comment.text,
        userId=comment.user_id,
        kanbanCardId=comment.card_id,
        replyForCommentId=comment.reply_for_comment_id,
        createdAt=comment.created_at,
        updatedAt=comment.updated_at,
    )


CARD_FIELDS = {
    "title": "title",
    "description": "description",
    "categoryTitle": "category_title",
    "categoryColor": "category_color",
    "priority": "priority",
    "status": "status",
    "likes": "likes",
}

COLUMN_FIELDS = {
    "name": "name",
    "disableAdd": "disable_add",
    "order": "order",
}


class KanbanService:
    def __init__(self, store: KanbanStore, avatar_base_url: str = threads.DEFAULT_AVATAR_BASE_URL) -> None:
        self.store = store
        self.avatar_base_url = avatar_base_url

    # === Lookups ===
    def _board(self, board_id: str, message: str = "Board not found") -> Board:
        board = self.store.get_board(board_id)
        if board is None:
            raise NotFoundError(message)
        return board

    def _column(self, column_id: str, message: str = "Column not found") -> ColumnModel:
        column = self.store.get_column(column_id)
        if column is None:
            raise NotFoundError(message)
        return column

    def _card(self, card_id: str) -> Card:
        card = self.store.get_card(card_id)
        if card is None:
            raise NotFoundError("Card not found")
        return card

    def _comment(self, comment_id: str, message: str = "Comment not found") -> Comment:
        comment = self.store.get_comment(comment_id)
        if comment is None:
            raise NotFoundError(message)
        return comment

    # === Boards ===
    def create_board(self, name: Optional[str]) -> BoardOut:
        if _blank(name):
            raise ValidationError("Board name is required")
        board = self.store.add_board(name.strip())
        self.store.commit()
        logger.info("board_created board_id=%s", board.id)
        return board_out(self._board(board.id))

    def update_board(self, board_id: str, name: Optional[str]) -> BoardOut:
        if _blank(name):
            raise ValidationError("Board name is required")
        board = self._board(board_id)
        board.name = name.strip()
        self.store.commit()
        return board_out(board)

    def delete_board(self, board_id: str) -> None:
        """Delete a board together with its columns, cards and comments."""
        board = self._board(board_id)
        self.store.delete(board)
        self.store.commit()
        logger.info("board_deleted board_id=%s", board_id)

    # === Columns ===
    def add_column(
        self,
        board_id: Optional[str],
        name: Optional[str],
        disable_add: bool = False,
        order: int = 0,
    ) -> ColumnOut:
        if _blank(board_id) or _blank(name):
            raise ValidationError("boardId and name are required")
        board = self._board(board_id)
        column = self.store.add_column(board.id, name.strip(), disable_add, order)
        self.store.commit()
        return column_out(self._column(column.id))

    def update_column(self, column_id: str, changes: Dict[str, Any]) -> ColumnOut:
        if "name" in changes and _blank(changes["name"]):
            raise ValidationError("Column name cannot be blank")
        column = self._column(column_id)
        updates = {COLUMN_FIELDS[k]: v for k, v in changes.items() if k in COLUMN_FIELDS}
        if "name" in updates:
            updates["name"] = updates["name"].strip()
        self.store.apply(column, updates)
        self.store.commit()
        return column_out(column)

    def delete_column(self, column_id: str) -> None:
        column = self._column(column_id)
        self.store.delete(column)
        self.store.commit()
        logger.info("column_deleted column_id=%s", column_id)

    # === Cards ===
    def add_card(
        self,
        column_id: Optional[str],
        title: Optional[str],
        description: Optional[str] = None,
        category_title: Optional[str] = None,
        category_color: Optional[str] = None,
        priority: Optional[Priority] = None,
        status: Optional[Status] = None,
    ) -> CardOut:
        if _blank(column_id) or _blank(title):
            raise ValidationError("columnId and title are required")
        column = self._column(column_id)
        if column.disable_add:
            raise ConflictError("Adding cards is disabled for this column")
        card = self.store.add_card(
            column.id,
            title.strip(),
            description=description or "",
            category_title=category_title or "",
            category_color=category_color or "#000000",
            priority=_enum_value(priority or Priority.MEDIUM),
            status=_enum_value(status or Status.TO_DO),
        )
        self.store.commit()
        logger.info("card_created card_id=%s column_id=%s", card.id, column.id)
        return card_out(self._card(card.id))

    def update_card(self, card_id: str, changes: Dict[str, Any]) -> CardOut:
        """Merge the provided fields into the card; priority and status may take any value."""
        if "title" in changes and _blank(changes["title"]):
            raise ValidationError("Card title cannot be blank")
        if changes.get("likes") is not None and changes["likes"] < 0:
            raise ValidationError("likes cannot be negative")
        card = self._card(card_id)
        updates = {CARD_FIELDS[k]: _enum_value(v) for k, v in changes.items() if k in CARD_FIELDS}
        if "title" in updates:
            updates["title"] = updates["title"].strip()
        self.store.apply(card, updates)
        self.store.commit()
        return card_out(card)

    def delete_card(self, card_id: str) -> None:
        card = self._card(card_id)
        self.store.delete(card)
        self.store.commit()
        logger.info("card_deleted card_id=%s", card_id)

    def move_card(self, card_id: Optional[str], target_column_id: Optional[str]) -> CardOut:
        """Reassign a card to another column.

        The target's ``disableAdd`` flag only guards card creation and is not
        checked here.
        """
        if _blank(card_id) or _blank(target_column_id):
            raise ValidationError("cardId and targetColumnId are required")
        card = self._card(card_id)
        column = self._column(target_column_id, "Target column not found")
        card.column_id = column.id
        self.store.commit()
        logger.info("card_moved card_id=%s column_id=%s", card.id, column.id)
        return card_out(card)

    def like_card(self, card_id: str, increment: bool = True) -> CardOut:
        card = self._card(card_id)
        self.store.adjust_likes(card.id, increment)
        self.store.commit()
        self.store.refresh(card)
        return card_out(card)

    # === Comments ===
    def add_comment(
        self,
        card_id: Optional[str],
        text: Optional[str],
        user_id: Optional[str],
        reply_for_comment_id: Optional[str] = None,
    ) -> CommentOut:
        if reply_for_comment_id:
            return self.add_reply(reply_for_comment_id, text, user_id, card_id)
        if _blank(card_id) or _blank(text) or _blank(user_id):
            raise ValidationError("cardId, text, and userId are required")
        card = self._card(card_id)
        comment = self.store.add_comment(card.id, user_id, text.strip())
        self.store.commit()
        return comment_out(self._comment(comment.id))

    def add_reply(
        self,
        reply_for_comment_id: Optional[str],
        text: Optional[str],
        user_id: Optional[str],
        card_id: Optional[str] = None,
    ) -> CommentOut:
        """Reply to a comment; the reply always lands on the parent's card."""
        if _blank(reply_for_comment_id) or _blank(text) or _blank(user_id):
            raise ValidationError("replyForCommentId, text, and userId are required")
        parent = self._comment(reply_for_comment_id, "Parent comment not found")
        if card_id and card_id != parent.card_id:
            raise ConflictError("Reply must belong to the same card as its parent comment")
        card = self._card(parent.card_id)
        reply = self.store.add_comment(card.id, user_id, text.strip(), parent.id)
        self.store.commit()
        return comment_out(self._comment(reply.id))

    def update_comment(self, comment_id: str, text: Optional[str]) -> CommentOut:
        if _blank(text):
            raise ValidationError("Comment text is required")
        comment = self._comment(comment_id)
        comment.text = text.strip()
        self.store.commit()
        return comment_out(comment)

    def delete_comment(self, comment_id: str) -> None:
        """Delete a comment and its direct replies."""
        comment = self._comment(comment_id)
        removed = self.store.delete_replies(comment.id)
        self.store.delete(comment)
        self.store.commit()
        logger.info("comment_deleted comment_id=%s replies=%s", comment_id, removed)

    def get_replies(self, comment_id: str) -> List[ReplyOut]:
        comment = self._comment(comment_id)
        return [
            ReplyOut(
                **threads.reply_node(r, self.avatar_base_url).model_dump(),
                userId=r.user_id,
                kanbanCardId=r.card_id,
                replyForCommentId=r.reply_for_comment_id,
            )
            for r in self.store.list_replies(comment.id, comment.card_id)
        ]
