from fastapi import Query, Request

from comment_board.cache import CacheManager
from comment_board.config import settings
from comment_board.errors import InvalidID, InvalidParameter
from comment_board.models import MAX_COMMENT_ID
from comment_board.pagination import MAX_PAGE, MAX_PAGE_SIZE, UNLIMITED_SENTINEL, PageSize
from comment_board.services.comment_service import CommentStore


def get_store(request: Request) -> CommentStore:
    """Return the ``CommentStore`` built by the application lifespan."""
    return request.app.state.store


def get_cache(request: Request) -> CacheManager:
    return request.app.state.cache


class PaginationParams:
    """
    FastAPI dependency that parses and validates the list query string.

    Attributes
    ----------
    page:
        1-based page number, between 1 and ``MAX_PAGE``.
    size:
        ``PageSize`` decoded from the ``size`` parameter, which must be
        between 1 and ``MAX_PAGE_SIZE`` or exactly ``-1`` ("all comments").
    """

    def __init__(
        self,
        page: int = Query(1, description="Page number (1-based)."),
        size: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            description="Comments per page, or -1 for all comments.",
        ),
    ) -> None:
        if not 1 <= page <= MAX_PAGE:
            raise InvalidParameter(f"page must be an integer between 1 and {MAX_PAGE}")
        if size != UNLIMITED_SENTINEL and not 1 <= size <= MAX_PAGE_SIZE:
            raise InvalidParameter(
                f"size must be an integer between 1 and {MAX_PAGE_SIZE}, or -1"
            )
        self.page = page
        self.size = PageSize.from_query(size)


def check_comment_id(comment_id: int) -> int:
    if not 1 <= comment_id <= MAX_COMMENT_ID:
        raise InvalidID(f"id must be a positive integer no greater than {MAX_COMMENT_ID}")
    return comment_id


def comment_id_param(
    comment_id: int | None = Query(None, alias="id", description="Comment ID."),
) -> int:
    """Required ``id`` query parameter."""
    if comment_id is None:
        raise InvalidParameter("Missing parameter id")
    return check_comment_id(comment_id)
