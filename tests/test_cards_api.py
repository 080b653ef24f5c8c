import pytest


@pytest.fixture
def column(api):
    board = api.board()
    return api.column(board["id"], "To Do")


def test_add_column_defaults_and_validation(api, client):
    board = api.board()

    column = api.column(board["id"], "Backlog")
    assert column["disableAdd"] is False
    assert column["order"] == 0
    assert column["boardId"] == board["id"]

    response = client.post("/kanban/column", json={"boardId": board["id"]})
    assert response.status_code == 400
    assert response.json() == {"message": "boardId and name are required"}

    response = client.post("/kanban/column", json={"boardId": "missing", "name": "x"})
    assert response.status_code == 404
    assert response.json() == {"message": "Board not found"}


def test_update_column_merges_fields(api, client, column):
    response = client.put(f"/kanban/column/{column['id']}", json={"disableAdd": True})

    data = response.json()["data"]
    assert data["disableAdd"] is True
    assert data["name"] == "To Do"
    assert data["order"] == 0

    response = client.put(f"/kanban/column/{column['id']}", json={"order": 3, "name": " Later "})
    assert response.json()["data"]["order"] == 3
    assert response.json()["data"]["name"] == "Later"


def test_delete_column_removes_its_cards(api, client, column):
    card = api.card(column["id"])

    assert client.delete(f"/kanban/column/{column['id']}").status_code == 200
    assert client.delete(f"/kanban/card/{card['id']}").status_code == 404
    assert client.delete(f"/kanban/column/{column['id']}").status_code == 404


def test_add_card_defaults(api, column):
    card = api.card(column["id"], "  Task A ")

    assert card["title"] == "Task A"
    assert card["kanbanColumnId"] == column["id"]
    assert card["priority"] == "MEDIUM"
    assert card["status"] == "TO_DO"
    assert card["likes"] == 0
    assert card["description"] == ""
    assert card["categoryTitle"] == ""
    assert card["categoryColor"] == "#000000"


def test_add_card_accepts_kanban_column_id_alias(client, column):
    response = client.post(
        "/kanban/card",
        json={"kanbanColumnId": column["id"], "title": "T", "priority": "URGENT", "status": "REVIEW"},
    )
    assert response.status_code == 201
    assert response.json()["data"]["priority"] == "URGENT"
    assert response.json()["data"]["status"] == "REVIEW"


def test_add_card_validation(client, column):
    response = client.post("/kanban/card", json={"columnId": column["id"], "title": " "})
    assert response.status_code == 400
    assert response.json() == {"message": "columnId and title are required"}

    response = client.post("/kanban/card", json={"columnId": "missing", "title": "T"})
    assert response.status_code == 404
    assert response.json() == {"message": "Column not found"}

    response = client.post("/kanban/card", json={"columnId": column["id"], "title": "T", "priority": "SOON"})
    assert response.status_code == 400
    assert response.json()["message"] == "Invalid request"


def test_add_card_to_disabled_column(api, client):
    board = api.board()
    locked = api.column(board["id"], "Done", disableAdd=True)

    response = client.post("/kanban/card", json={"columnId": locked["id"], "title": "T"})

    assert response.status_code == 400
    assert response.json() == {"message": "Adding cards is disabled for this column"}


def test_update_card_merges_only_provided_fields(api, client, column):
    card = api.card(column["id"], "Task", description="keep me")

    response = client.put(f"/kanban/card/{card['id']}", json={"status": "DONE"})
    data = response.json()["data"]
    assert data["status"] == "DONE"
    assert data["description"] == "keep me"
    assert data["title"] == "Task"

    # No workflow: any status is reachable from any other.
    response = client.put(f"/kanban/card/{card['id']}", json={"status": "TO_DO", "priority": "LOW"})
    assert response.json()["data"]["status"] == "TO_DO"
    assert response.json()["data"]["priority"] == "LOW"


def test_update_card_validation(api, client, column):
    card = api.card(column["id"])

    assert client.put(f"/kanban/card/{card['id']}", json={"title": ""}).status_code == 400
    assert client.put(f"/kanban/card/{card['id']}", json={"likes": -1}).status_code == 400
    assert client.put("/kanban/card/missing", json={"title": "x"}).status_code == 404


def test_move_card(api, client):
    board = api.board()
    todo = api.column(board["id"], "To Do", order=0)
    done = api.column(board["id"], "Done", order=1)
    card = api.card(todo["id"])

    response = client.put("/kanban/card/move", json={"cardId": card["id"], "targetColumnId": done["id"]})

    assert response.status_code == 200
    assert response.json()["data"]["kanbanColumnId"] == done["id"]
    columns = api.board_detail(board["id"])["data"]["kanbanColumns"]
    assert columns[0]["items"] == []
    assert [i["id"] for i in columns[1]["items"]] == [card["id"]]


def test_move_card_into_disabled_column_is_allowed(api, client):
    board = api.board()
    todo = api.column(board["id"], "To Do")
    locked = api.column(board["id"], "Done", disableAdd=True)
    card = api.card(todo["id"])

    response = client.put(
        "/kanban/card/move",
        json={"cardId": card["id"], "newColumnId": locked["id"], "newIndex": 0},
    )

    assert response.status_code == 200
    assert response.json()["data"]["kanbanColumnId"] == locked["id"]


def test_move_card_not_found(api, client, column):
    card = api.card(column["id"])

    response = client.put("/kanban/card/move", json={"cardId": card["id"], "targetColumnId": "missing"})
    assert response.status_code == 404
    assert response.json() == {"message": "Target column not found"}

    response = client.put("/kanban/card/move", json={"cardId": "missing", "targetColumnId": "missing"})
    assert response.status_code == 404
    assert response.json() == {"message": "Card not found"}

    # Nothing moved.
    response = client.put(f"/kanban/card/{card['id']}", json={})
    assert response.json()["data"]["kanbanColumnId"] == column["id"]


def test_move_card_requires_ids(client):
    response = client.put("/kanban/card/move", json={"cardId": "x"})
    assert response.status_code == 400
    assert response.json() == {"message": "cardId and targetColumnId are required"}


def test_like_and_unlike(api, client, column):
    card = api.card(column["id"])

    for expected in [1, 2]:
        response = client.post(f"/kanban/card/{card['id']}/like")
        assert response.status_code == 200
        assert response.json()["data"]["likes"] == expected

    for expected in [1, 0, 0]:
        response = client.post(f"/kanban/card/{card['id']}/like", params={"increment": "false"})
        assert response.json()["data"]["likes"] == expected


def test_unlike_at_zero_stays_zero(api, client, column):
    card = api.card(column["id"])

    response = client.post(f"/kanban/card/{card['id']}/like", params={"increment": False})

    assert response.json()["message"] == f"Card with ID {card['id']} unliked"
    assert response.json()["data"]["likes"] == 0


def test_like_missing_card(client):
    response = client.post("/kanban/card/missing/like")
    assert response.status_code == 404
    assert response.json() == {"message": "Card not found"}


def test_delete_card(api, client, column):
    card = api.card(column["id"])
    api.comment(card["id"])

    response = client.delete(f"/kanban/card/{card['id']}")

    assert response.status_code == 200
    assert response.json() == {"message": f"Card with ID {card['id']} deleted"}
    assert client.post(f"/kanban/card/{card['id']}/like").status_code == 404
