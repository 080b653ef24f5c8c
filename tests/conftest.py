from __future__ import annotations

from typing import Any, Dict, Iterator

import pytest
from fastapi.testclient import TestClient

from kanban_api.config import Settings
from kanban_api.db import init_db, make_engine, make_session_factory
from kanban_api.main import create_app
from kanban_api.storage import KanbanStore


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a throwaway SQLite database."""
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'kanban.db'}",
        log_level="WARNING",
        avatar_base_url="https://avatars.test/img",
    )


@pytest.fixture
def client(settings: Settings) -> Iterator[TestClient]:
    app = create_app(settings)
    with TestClient(app, headers={"Authorization": "Bearer user-1"}) as test_client:
        yield test_client


@pytest.fixture
def store(settings: Settings) -> Iterator[KanbanStore]:
    engine = make_engine(settings.database_url)
    init_db(engine)
    session = make_session_factory(engine)()
    try:
        yield KanbanStore(session)
    finally:
        session.close()
        engine.dispose()


class KanbanApi:
    """Thin helpers over the HTTP routes for building fixtures."""

    def __init__(self, client: TestClient) -> None:
        self.client = client

    def _created(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        response = self.client.post(path, json=body)
        assert response.status_code == 201, response.text
        return response.json()["data"]

    def board(self, name: str = "Sprint 1") -> Dict[str, Any]:
        return self._created("/kanban", {"name": name})

    def column(self, board_id: str, name: str = "To Do", **extra: Any) -> Dict[str, Any]:
        return self._created("/kanban/column", {"boardId": board_id, "name": name, **extra})

    def card(self, column_id: str, title: str = "Task A", **extra: Any) -> Dict[str, Any]:
        return self._created("/kanban/card", {"columnId": column_id, "title": title, **extra})

    def comment(self, card_id: str, text: str = "root", **extra: Any) -> Dict[str, Any]:
        return self._created("/kanban/comment", {"cardId": card_id, "text": text, **extra})

    def reply(self, comment_id: str, text: str = "reply", **extra: Any) -> Dict[str, Any]:
        return self._created("/kanban/reply", {"replyForCommentId": comment_id, "text": text, **extra})

    def board_detail(self, board_id: str, **params: Any) -> Dict[str, Any]:
        response = self.client.get(f"/kanban/{board_id}", params=params)
        assert response.status_code == 200, response.text
        return response.json()


@pytest.fixture
def api(client: TestClient) -> KanbanApi:
    return KanbanApi(client)
