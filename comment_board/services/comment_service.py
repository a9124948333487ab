"""
Comment store: validation, pagination and transaction boundaries for the
``comments`` table.

Design notes
------------
- ``CommentStore`` is an explicit object built around an
  ``async_sessionmaker``.  Each operation opens its own session, and every
  write runs inside ``session.begin()`` so it either commits as a whole or
  rolls back and leaves the table untouched.
- ``list_comments`` issues the COUNT and the page SELECT inside one read
  transaction on one connection, so ``total`` and the page come from the
  same view of the table as far as the engine's isolation level allows.
- ``get_comment`` reads through the Redis cache.  Comments are immutable,
  so ``delete_comment`` is the only place an entry is invalidated; it also
  leaves a short-lived tombstone so a lookup racing the delete cannot put
  the row back into the cache.
- Every ``SQLAlchemyError`` is re-raised as ``StorageError`` with the
  original exception chained; there are no retries.
"""
import logging

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from comment_board.cache import CacheManager
from comment_board.errors import (
    ContentRequired,
    InvalidID,
    NameRequired,
    NameTooLong,
    NotFound,
    StorageError,
)
from comment_board.models import MAX_COMMENT_ID, NAME_MAX_LENGTH, Comment
from comment_board.pagination import PageSize
from comment_board.schemas import CommentCreate, CommentPage, CommentResponse

logger = logging.getLogger(__name__)


def validate_comment(data: CommentCreate) -> None:
    """
    Raise the first validation error for *data*, checking in this order:
    name present, name length, content present.

    Length is measured in characters, not encoded bytes.
    """
    if not data.name:
        raise NameRequired()
    if len(data.name) > NAME_MAX_LENGTH:
        raise NameTooLong()
    if not data.content:
        raise ContentRequired()


def _check_id(comment_id: int) -> None:
    # Out-of-range ids would overflow the driver's integer binding.
    if not 1 <= comment_id <= MAX_COMMENT_ID:
        raise InvalidID()


class CommentStore:
    def __init__(
        self,
        sessionmaker: async_sessionmaker[AsyncSession],
        cache: CacheManager | None = None,
        detail_ttl: int | None = None,
    ) -> None:
        self._sessionmaker = sessionmaker
        self._cache = cache
        self._detail_ttl = detail_ttl

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_comment(self, data: CommentCreate) -> CommentResponse:
        """
        Validate and insert a new comment in its own transaction.

        Storage assigns ``id``; ``created_at`` and ``updated_at`` are set on
        flush.  Returns the persisted comment.
        """
        validate_comment(data)

        comment = Comment(name=data.name, content=data.content)
        try:
            async with self._sessionmaker() as session, session.begin():
                session.add(comment)
                await session.flush()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to create comment") from exc

        logger.info("Created comment id=%d", comment.id)
        return CommentResponse.model_validate(comment)

    async def delete_comment(self, comment_id: int) -> bool:
        """
        Permanently delete *comment_id* in its own transaction.

        Returns True when a row was removed and False when nothing matched,
        so callers can report a missing comment without a separate lookup.
        """
        _check_id(comment_id)

        stmt = delete(Comment).where(Comment.id == comment_id)
        try:
            async with self._sessionmaker() as session, session.begin():
                result = await session.execute(stmt)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to delete comment {comment_id}") from exc

        if self._cache is not None:
            await self._cache.invalidate_comment(comment_id)

        removed = result.rowcount > 0
        if removed:
            logger.info("Deleted comment id=%d", comment_id)
        return removed

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_comment(self, comment_id: int) -> CommentResponse:
        _check_id(comment_id)

        cache_key = CacheManager.comment_key(comment_id)
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached:
                return CommentResponse(**cached)

        try:
            async with self._sessionmaker() as session:
                comment = await session.get(Comment, comment_id)
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load comment {comment_id}") from exc

        if comment is None:
            raise NotFound(comment_id)

        response = CommentResponse.model_validate(comment)
        if self._cache is not None:
            await self._cache.cache_comment(
                comment_id, response.model_dump(mode="json"), ttl=self._detail_ttl
            )
        return response

    async def list_comments(self, page: int, size: PageSize) -> CommentPage:
        """
        Return one page of comments, newest first, with the full row count.

        *page* is 1-based.  Bounds checking on *page* belongs to the caller;
        a page below 1 is treated as the first page rather than producing a
        negative OFFSET, and pages past ``pagination.MAX_PAGE`` are read as ``MAX_PAGE``.
        ``PageSize.unlimited()`` returns every row.
        """
        logger.debug("Listing comments page=%d size=%s", page, size)
        stmt = select(Comment).order_by(Comment.created_at.desc(), Comment.id.desc())
        if not size.is_unlimited:
            stmt = stmt.offset(size.offset(page)).limit(size.limit)

        try:
            async with self._sessionmaker() as session, session.begin():
                total = (
                    await session.execute(select(func.count()).select_from(Comment))
                ).scalar_one()
                comments = (await session.scalars(stmt)).all()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to list comments") from exc

        return CommentPage(
            total=total,
            comments=[CommentResponse.model_validate(c) for c in comments],
        )

    async def count_comments(self) -> int:
        try:
            async with self._sessionmaker() as session:
                return (
                    await session.execute(select(func.count()).select_from(Comment))
                ).scalar_one()
        except SQLAlchemyError as exc:
            raise StorageError("Failed to count comments") from exc
