"""
Error taxonomy for the comment board.

Every domain failure is a ``CommentBoardError`` carrying the HTTP status it
maps to.  The exception handlers in ``comment_board.main`` render any of them
as the standard ``{code, msg, data}`` envelope, so routers and the store only
ever ``raise``.
"""


class CommentBoardError(Exception):
    status_code: int = 500
    message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.message
        super().__init__(self.message)


# ---------------------------------------------------------------------------
# Client input defects (400)
# ---------------------------------------------------------------------------

class ValidationError(CommentBoardError):
    status_code = 400
    message = "Invalid comment"


class NameRequired(ValidationError):
    message = "Commenter name is required"


class NameTooLong(ValidationError):
    message = "Commenter name must not exceed 100 characters"


class ContentRequired(ValidationError):
    message = "Comment content is required"


class InvalidID(CommentBoardError):
    status_code = 400
    message = "Invalid comment ID"


class InvalidParameter(CommentBoardError):
    """Malformed transport-level parameter (query string or request body)."""

    status_code = 400
    message = "Invalid request parameter"


# ---------------------------------------------------------------------------
# Lookup / storage failures
# ---------------------------------------------------------------------------

class NotFound(CommentBoardError):
    status_code = 404
    message = "Comment not found"

    def __init__(self, comment_id: int) -> None:
        self.comment_id = comment_id
        super().__init__(f"Comment {comment_id} not found")


class StorageError(CommentBoardError):
    """
    Underlying database failure.

    Always raised ``from`` the original exception so the cause stays on
    ``__cause__`` for diagnostics; the message itself never leaks driver
    details to clients.
    """

    status_code = 500
    message = "Storage failure"
