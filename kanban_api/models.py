from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class Priority(str, Enum):
    URGENT = "URGENT"
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class Status(str, Enum):
    TO_DO = "TO_DO"
    DONE = "DONE"
    REVIEW = "REVIEW"
    PROCESS = "PROCESS"


# === API payloads ===
# Required-field and blank checks live in KanbanService; payloads only pin types,
# enums and ranges.


class BoardCreate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=191)


class BoardUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=191)


class ColumnCreate(BaseModel):
    boardId: Optional[str] = None
    name: Optional[str] = Field(default=None, max_length=191)
    disableAdd: bool = False
    order: int = 0


class ColumnUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=191)
    disableAdd: Optional[bool] = None
    order: Optional[int] = None


class CardCreate(BaseModel):
    columnId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("columnId", "kanbanColumnId")
    )
    title: Optional[str] = Field(default=None, max_length=191)
    description: Optional[str] = None
    categoryTitle: Optional[str] = Field(default=None, max_length=191)
    categoryColor: Optional[str] = Field(default=None, max_length=191)
    priority: Optional[Priority] = None
    status: Optional[Status] = None


class CardUpdate(BaseModel):
    title: Optional[str] = Field(default=None, max_length=191)
    description: Optional[str] = None
    categoryTitle: Optional[str] = Field(default=None, max_length=191)
    categoryColor: Optional[str] = Field(default=None, max_length=191)
    priority: Optional[Priority] = None
    status: Optional[Status] = None
    likes: Optional[int] = Field(default=None, ge=0)


class CardMove(BaseModel):
    cardId: Optional[str] = None
    targetColumnId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("targetColumnId", "newColumnId")
    )
    # Accepted from drag-and-drop clients; card position inside a column is not persisted.
    newIndex: Optional[int] = None


class CommentCreate(BaseModel):
    cardId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("cardId", "kanbanCardId")
    )
    text: Optional[str] = None
    userId: Optional[str] = None
    replyForCommentId: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("replyForCommentId", "replyForKanbanCommentId"),
    )


class CommentUpdate(BaseModel):
    text: Optional[str] = None


class ReplyCreate(BaseModel):
    replyForCommentId: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("replyForCommentId", "replyForKanbanCommentId"),
    )
    text: Optional[str] = None
    userId: Optional[str] = None
    cardId: Optional[str] = Field(
        default=None, validation_alias=AliasChoices("cardId", "kanbanCardId")
    )
