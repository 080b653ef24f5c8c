"""Tests for comment thread building."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from kanban_api.storage import CommentRecord
from kanban_api.threads import avatar_url, build_thread, comment_count, display_author

BASE = datetime(2024, 1, 1, tzinfo=timezone.utc)


def record(comment_id, parent=None, minute=0, **extra) -> CommentRecord:
    fields = dict(
        id=comment_id,
        text=f"text {comment_id}",
        user_id="u-1",
        card_id="card-1",
        reply_for_comment_id=parent,
        created_at=BASE + timedelta(minutes=minute),
    )
    fields.update(extra)
    return CommentRecord(**fields)


@pytest.fixture
def comments():
    return [
        record("c1", minute=0),
        record("r1", parent="c1", minute=1),
        record("c2", minute=2),
        record("r2", parent="c1", minute=3),
        record("rr1", parent="r1", minute=4),
        record("dangling", parent="missing", minute=5),
    ]


def test_roots_keep_order_and_collect_direct_replies(comments):
    thread = build_thread(comments)

    assert [node.id for node in thread] == ["c1", "c2"]
    assert [reply.id for reply in thread[0].replies] == ["r1", "r2"]
    assert thread[1].replies == []


def test_reply_to_reply_and_dangling_reply_are_not_shown(comments):
    thread = build_thread(comments)

    shown = {node.id for node in thread} | {r.id for node in thread for r in node.replies}
    assert "rr1" not in shown
    assert "dangling" not in shown


def test_comment_count_counts_roots_only(comments):
    assert comment_count(comments) == 2
    assert comment_count([]) == 0


def test_empty_and_reply_only_input():
    assert build_thread([]) == []
    assert build_thread([record("r", parent="gone")]) == []


def test_author_prefers_user_names_over_user_id():
    known = record("c1", firstname="Ada", lastname="Lovelace", username="ada")
    unknown = record("c2")

    assert display_author(known) == "Ada Lovelace"
    assert display_author(unknown) == "u-1"


def test_avatar_is_deterministic_per_identity():
    first = record("c1", username="ada lovelace")
    second = record("c2", username="ada lovelace")
    other = record("c3", user_id="u-2")

    assert avatar_url(first, "https://img.test") == "https://img.test?u=ada%20lovelace"
    assert avatar_url(first) == avatar_url(second)
    assert avatar_url(other) != avatar_url(first)


def test_node_fields():
    node = build_thread([record("c1", firstname="Ada", lastname="L")], "https://img.test")[0]

    assert node.text == "text c1"
    assert node.author == "Ada L"
    assert node.date == "2024-01-01T00:00:00.000Z"
    assert node.avatar == "https://img.test?u=u-1"


def test_date_is_utc_with_z_suffix():
    naive = build_thread([record("c1", created_at=datetime(2024, 3, 5, 9, 30, 15, 250000))])[0]
    assert naive.date == "2024-03-05T09:30:15.250Z"

    offset = datetime(2024, 3, 5, 11, 30, tzinfo=timezone(timedelta(hours=2)))
    shifted = build_thread([record("c1", created_at=offset)])[0]
    assert shifted.date == "2024-03-05T09:30:00.000Z"


def test_missing_created_at_renders_empty_date():
    node = build_thread([record("c1", created_at=None)])[0]
    assert node.date == ""
