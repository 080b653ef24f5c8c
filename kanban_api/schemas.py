from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional, Union

from pydantic import BaseModel


class ErrorEnvelope(BaseModel):
    message: str
    error: Optional[Any] = None


class Health(BaseModel):
    status: str = "ok"


class Version(BaseModel):
    version: str


class Pagination(BaseModel):
    page: int
    limit: int
    totalPages: int
    hasNextPage: bool
    hasPrevPage: bool


class CardPagination(Pagination):
    totalCards: int


# === Entity rows returned by mutations ===


class BoardOut(BaseModel):
    id: str
    name: str


class ColumnOut(BaseModel):
    id: str
    name: str
    boardId: str
    disableAdd: bool
    order: int


class CardOut(BaseModel):
    id: str
    kanbanColumnId: str
    title: str
    description: str
    categoryTitle: str
    categoryColor: str
    priority: str
    status: str
    likes: int


class CommentOut(BaseModel):
    id: str
    text: str
    userId: str
    kanbanCardId: str
    replyForCommentId: Optional[str]
    createdAt: Optional[datetime]
    updatedAt: Optional[datetime]


# === Assembled board views ===


class ReplyNode(BaseModel):
    id: str
    text: str
    author: str
    date: str
    avatar: str


class CommentNode(ReplyNode):
    replies: List[ReplyNode]


class ReplyOut(ReplyNode):
    userId: str
    kanbanCardId: str
    replyForCommentId: Optional[str]


class Category(BaseModel):
    icon: str = ""
    label: str
    color: str


class CardSummaryContent(BaseModel):
    title: str
    description: str
    category: Category
    priority: str
    status: str
    likes: int
    commentCount: int


class CardDetailContent(CardSummaryContent):
    comments: List[CommentNode]


class CardItem(BaseModel):
    id: str
    content: Union[CardDetailContent, CardSummaryContent]


class ColumnView(BaseModel):
    id: str
    name: str
    disableAdd: bool
    order: int
    items: List[CardItem]


class BoardView(BaseModel):
    id: str
    name: str
    kanbanColumns: List[ColumnView]
