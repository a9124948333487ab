"""
Page-size value passed from the request layer to ``CommentStore.list``.

The HTTP API encodes "return everything" as ``size=-1``.  That sentinel is
decoded exactly once, in ``PageSize.from_query``; past that point code deals
with ``PageSize.unlimited()`` and never with a magic number.
"""
from __future__ import annotations

from dataclasses import dataclass

UNLIMITED_SENTINEL = -1
# Both bounds keep (page - 1) * size well inside a signed 64-bit OFFSET.
MAX_PAGE = 2**31 - 1
MAX_PAGE_SIZE = 2**31 - 1


@dataclass(frozen=True)
class PageSize:
    limit: int | None = None

    def __post_init__(self) -> None:
        if self.limit is not None and not 1 <= self.limit <= MAX_PAGE_SIZE:
            raise ValueError(
                f"page size must be between 1 and {MAX_PAGE_SIZE}, got {self.limit}"
            )

    @classmethod
    def limited(cls, limit: int) -> PageSize:
        return cls(limit)

    @classmethod
    def unlimited(cls) -> PageSize:
        return cls(None)

    @classmethod
    def from_query(cls, raw: int) -> PageSize:
        """Decode the wire value: ``-1`` means all rows, otherwise ``>= 1``."""
        if raw == UNLIMITED_SENTINEL:
            return cls.unlimited()
        return cls.limited(raw)

    @property
    def is_unlimited(self) -> bool:
        return self.limit is None

    def offset(self, page: int) -> int:
        """
        SQL OFFSET for the 1-based *page*: 0 when unlimited or page < 1, and
        *page* is capped at ``MAX_PAGE`` so the result always fits a 64-bit OFFSET.
        """
        if self.limit is None:
            return 0
        return max((min(page, MAX_PAGE) - 1) * self.limit, 0)

    def __str__(self) -> str:
        return "all" if self.limit is None else str(self.limit)
