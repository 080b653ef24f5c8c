from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from .schemas import Pagination

# Keeps (page - 1) * limit inside a 64-bit SQL integer.
MAX_PAGE = 10**9
MAX_LIMIT = 1000


@dataclass(frozen=True)
class PageRequest:
    """``page`` is 1-based; a ``limit`` of ``None`` or ``0`` means "everything"."""

    page: int = 1
    limit: Optional[int] = None

    @property
    def enabled(self) -> bool:
        return bool(self.limit)

    @property
    def offset(self) -> int:
        if not self.enabled:
            return 0
        return (self.page - 1) * self.limit

    @property
    def size(self) -> Optional[int]:
        return self.limit if self.enabled else None


def pagination_meta(page: int, limit: Optional[int], total: int) -> Optional[Pagination]:
    """Pagination block for a collection of ``total`` items, or ``None`` when paging is off."""
    if not limit:
        return None
    total_pages = math.ceil(total / limit)
    return Pagination(
        page=page,
        limit=limit,
        totalPages=total_pages,
        hasNextPage=page < total_pages,
        hasPrevPage=page > 1,
    )
