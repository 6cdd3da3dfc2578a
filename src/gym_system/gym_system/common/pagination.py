from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Generic, Sequence, TypeVar

from ..core.constants import MAX_PAGE_SIZE

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = 20

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def from_args(cls, page: object, limit: object, *, default_limit: int) -> "PageRequest":
        def _as_int(value: object, fallback: int) -> int:
            try:
                return int(str(value))
            except (TypeError, ValueError):
                return fallback

        page_n = max(_as_int(page, 1), 1)
        limit_n = min(max(_as_int(limit, default_limit), 1), MAX_PAGE_SIZE)
        return cls(page=page_n, limit=limit_n)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    page: int
    limit: int
    total: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

    def pagination(self) -> dict:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
        }
