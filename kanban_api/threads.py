"""Two-level comment threads for a card.

Comments reference their parent through ``reply_for_comment_id``. Threads are
rebuilt in memory with a single partition pass: top-level comments become
roots and every reply is grouped under its parent id. Only replies whose
parent is a root are shown; replies to replies and replies pointing at
unknown comments stay in storage but are left out of the presented tree.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import timezone
from typing import Dict, Iterable, List
from urllib.parse import quote

from .schemas import CommentNode, ReplyNode
from .storage import CommentRecord

DEFAULT_AVATAR_BASE_URL = "https://i.pravatar.cc/150"


def display_author(comment: CommentRecord) -> str:
    if comment.firstname is None and comment.lastname is None:
        return comment.user_id
    return f"{comment.firstname or ''} {comment.lastname or ''}".strip()


def avatar_url(comment: CommentRecord, base_url: str = DEFAULT_AVATAR_BASE_URL) -> str:
    identity = comment.username or comment.user_id
    return f"{base_url}?u={quote(identity, safe='')}"


def _iso(comment: CommentRecord) -> str:
    # SQLite hands back naive datetimes; stored values are always UTC.
    created = comment.created_at
    if created is None:
        return ""
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def reply_node(comment: CommentRecord, base_url: str = DEFAULT_AVATAR_BASE_URL) -> ReplyNode:
    return ReplyNode(
        id=comment.id,
        text=comment.text,
        author=display_author(comment),
        date=_iso(comment),
        avatar=avatar_url(comment, base_url),
    )


def partition(comments: Iterable[CommentRecord]) -> tuple[List[CommentRecord], Dict[str, List[CommentRecord]]]:
    """Split comments into roots and replies grouped by parent id, keeping input order."""
    roots: List[CommentRecord] = []
    replies_by_parent: Dict[str, List[CommentRecord]] = defaultdict(list)
    for comment in comments:
        if comment.reply_for_comment_id is None:
            roots.append(comment)
        else:
            replies_by_parent[comment.reply_for_comment_id].append(comment)
    return roots, replies_by_parent


def build_thread(
    comments: Iterable[CommentRecord],
    base_url: str = DEFAULT_AVATAR_BASE_URL,
) -> List[CommentNode]:
    roots, replies_by_parent = partition(comments)
    thread = []
    for root in roots:
        node = reply_node(root, base_url)
        thread.append(
            CommentNode(
                **node.model_dump(),
                replies=[reply_node(r, base_url) for r in replies_by_parent.get(root.id, [])],
            )
        )
    return thread


def comment_count(comments: Iterable[CommentRecord]) -> int:
    """Number of top-level comments; replies are not counted."""
    return sum(1 for c in comments if c.reply_for_comment_id is None)
