"""Kanban HTTP routes."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from .assembly import BoardAggregateService
from .auth import get_current_user
from .models import (
    BoardCreate,
    BoardUpdate,
    CardCreate,
    CardMove,
    CardUpdate,
    ColumnCreate,
    ColumnUpdate,
    CommentCreate,
    CommentUpdate,
    ReplyCreate,
)
from .pagination import MAX_LIMIT, MAX_PAGE, PageRequest, pagination_meta
from .schemas import CardPagination
from .service import KanbanService
from .storage import KanbanStore

router = APIRouter(prefix="/kanban", tags=["kanban"], dependencies=[Depends(get_current_user)])


# === Dependencies ===


def get_session(request: Request) -> Iterator[Session]:
    session = request.app.state.session_factory()
    try:
        yield session
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_store(session: Session = Depends(get_session)) -> KanbanStore:
    return KanbanStore(session)


def get_service(request: Request, store: KanbanStore = Depends(get_store)) -> KanbanService:
    return KanbanService(store, request.app.state.settings.avatar_base_url)


def get_boards(request: Request, store: KanbanStore = Depends(get_store)) -> BoardAggregateService:
    return BoardAggregateService(store, request.app.state.settings.avatar_base_url)


def get_page(
    page: int = Query(1, ge=1, le=MAX_PAGE),
    limit: Optional[int] = Query(None, ge=0, le=MAX_LIMIT),
) -> PageRequest:
    return PageRequest(page=page, limit=limit)


def envelope(message: str, data: Any = None, **extra: Any) -> Dict[str, Any]:
    body: Dict[str, Any] = {"message": message}
    if data is not None:
        body["data"] = data
    body.update({key: value for key, value in extra.items() if value is not None})
    return body


def _dump(meta: Any) -> Optional[Dict[str, Any]]:
    return meta.model_dump() if meta is not None else None


# === Board reads ===


@router.get("", response_model=dict)
def get_all_boards(
    search: Optional[str] = None,
    page: PageRequest = Depends(get_page),
    boards: BoardAggregateService = Depends(get_boards),
):
    views, total = boards.list_boards_full(page, search)
    return envelope(
        f"Retrieved {len(views)} kanban boards",
        views,
        count=len(views),
        totalCount=total,
        pagination=_dump(pagination_meta(page.page, page.limit, total)),
    )


@router.get("/list", response_model=dict)
def get_board_list(
    page: PageRequest = Depends(get_page),
    boards: BoardAggregateService = Depends(get_boards),
):
    items, total = boards.list_boards(page)
    return envelope(
        f"Retrieved {len(items)} boards",
        items,
        count=len(items),
        totalCount=total,
        pagination=_dump(pagination_meta(page.page, page.limit, total)),
    )


@router.get("/board/{board_id}", response_model=dict)
def get_board_by_id(board_id: str, boards: BoardAggregateService = Depends(get_boards)):
    return envelope(f"Retrieved board with ID {board_id}", boards.get_board(board_id))


@router.get("/comment/{comment_id}/replies", response_model=dict)
def get_replies(comment_id: str, service: KanbanService = Depends(get_service)):
    replies = service.get_replies(comment_id)
    return envelope(f"Retrieved {len(replies)} replies", replies, count=len(replies))


@router.get("/{board_id}", response_model=dict)
def get_kanban_board_by_id(
    board_id: str,
    page: PageRequest = Depends(get_page),
    boards: BoardAggregateService = Depends(get_boards),
):
    view, total_cards = boards.get_board_detail(board_id, page)
    meta = pagination_meta(page.page, page.limit, total_cards)
    if meta is not None:
        meta = CardPagination(**meta.model_dump(), totalCards=total_cards)
    return envelope(
        f"Get kanban board with ID {board_id}",
        view,
        totalCount=total_cards,
        pagination=_dump(meta),
    )


# === Boards ===


@router.post("", response_model=dict, status_code=status.HTTP_201_CREATED)
def create_board(payload: BoardCreate, service: KanbanService = Depends(get_service)):
    return envelope("Board created successfully", service.create_board(payload.name))


@router.put("/card/move", response_model=dict)
def move_card(payload: CardMove, service: KanbanService = Depends(get_service)):
    card = service.move_card(payload.cardId, payload.targetColumnId)
    return envelope("Card moved successfully", card)


@router.put("/{board_id}", response_model=dict)
def update_board(board_id: str, payload: BoardUpdate, service: KanbanService = Depends(get_service)):
    board = service.update_board(board_id, payload.name)
    return envelope(f"Board with ID {board_id} updated", board)


@router.delete("/{board_id}", response_model=dict)
def delete_board(board_id: str, service: KanbanService = Depends(get_service)):
    service.delete_board(board_id)
    return envelope(f"Board with ID {board_id} deleted")


# === Columns ===


@router.post("/column", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_column(payload: ColumnCreate, service: KanbanService = Depends(get_service)):
    column = service.add_column(payload.boardId, payload.name, payload.disableAdd, payload.order)
    return envelope("Column added successfully", column)


@router.put("/column/{column_id}", response_model=dict)
def update_column(column_id: str, payload: ColumnUpdate, service: KanbanService = Depends(get_service)):
    column = service.update_column(column_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return envelope(f"Column with ID {column_id} updated", column)


@router.delete("/column/{column_id}", response_model=dict)
def delete_column(column_id: str, service: KanbanService = Depends(get_service)):
    service.delete_column(column_id)
    return envelope(f"Column with ID {column_id} deleted")


# === Cards ===


@router.post("/card", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_card(payload: CardCreate, service: KanbanService = Depends(get_service)):
    card = service.add_card(
        payload.columnId,
        payload.title,
        description=payload.description,
        category_title=payload.categoryTitle,
        category_color=payload.categoryColor,
        priority=payload.priority,
        status=payload.status,
    )
    return envelope("Card created successfully", card)


@router.put("/card/{card_id}", response_model=dict)
def update_card(card_id: str, payload: CardUpdate, service: KanbanService = Depends(get_service)):
    card = service.update_card(card_id, payload.model_dump(exclude_unset=True, exclude_none=True))
    return envelope(f"Card with ID {card_id} updated", card)


@router.delete("/card/{card_id}", response_model=dict)
def delete_card(card_id: str, service: KanbanService = Depends(get_service)):
    service.delete_card(card_id)
    return envelope(f"Card with ID {card_id} deleted")


@router.post("/card/{card_id}/like", response_model=dict)
def like_card(card_id: str, increment: bool = True, service: KanbanService = Depends(get_service)):
    card = service.like_card(card_id, increment)
    verb = "liked" if increment else "unliked"
    return envelope(f"Card with ID {card_id} {verb}", card)


# === Comments ===


@router.post("/comment", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_comment(
    payload: CommentCreate,
    user: str = Depends(get_current_user),
    service: KanbanService = Depends(get_service),
):
    comment = service.add_comment(
        payload.cardId,
        payload.text,
        payload.userId or user,
        payload.replyForCommentId,
    )
    return envelope("Comment created successfully", comment)


@router.put("/comment/{comment_id}", response_model=dict)
def update_comment(comment_id: str, payload: CommentUpdate, service: KanbanService = Depends(get_service)):
    comment = service.update_comment(comment_id, payload.text)
    return envelope(f"Comment with ID {comment_id} updated", comment)


@router.delete("/comment/{comment_id}", response_model=dict)
def delete_comment(comment_id: str, service: KanbanService = Depends(get_service)):
    service.delete_comment(comment_id)
    return envelope(f"Comment with ID {comment_id} deleted")


@router.post("/reply", response_model=dict, status_code=status.HTTP_201_CREATED)
def add_reply(
    payload: ReplyCreate,
    user: str = Depends(get_current_user),
    service: KanbanService = Depends(get_service),
):
    reply = service.add_reply(payload.replyForCommentId, payload.text, payload.userId or user, payload.cardId)
    return envelope("Reply created successfully", reply)
