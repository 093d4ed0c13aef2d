"""
Domain Exceptions

Errors raised by the service layer. Services know nothing about HTTP;
each exception carries the status code it maps to, and a single handler
registered in main.create_app() turns them into JSON responses:

    {"detail": "Book with id 7 not found"}
    {"detail": "Invalid input", "errors": [{"field": "rating", "message": "..."}]}

Hierarchy:
- BookReviewsError
  - ValidationError: malformed or out-of-range input (field-level messages)
  - NotFoundError: referenced entity does not exist
  - AuthenticationError: missing or invalid credentials (401)
  - AuthorizationError: authenticated but not the owner/author (403)
  - ConflictError: duplicate review or duplicate account
  - RatingSyncError: the cached rating could not be recomputed
"""

from typing import Any


class BookReviewsError(Exception):
    """Base class for all domain errors."""

    status_code: int = 400
    default_detail: str = "Request could not be processed"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_dict(self) -> dict[str, Any]:
        """Body of the error response."""
        return {"detail": self.detail}


class ValidationError(BookReviewsError):
    """
    Raised when input validation fails.

    Attributes:
        errors: list of {"field": ..., "message": ...} entries
    """

    status_code = 422
    default_detail = "Invalid input"

    def __init__(
        self,
        errors: list[dict[str, str]],
        detail: str | None = None,
    ) -> None:
        self.errors = errors
        super().__init__(detail)

    def to_dict(self) -> dict[str, Any]:
        return {"detail": self.detail, "errors": self.errors}


class NotFoundError(BookReviewsError):
    """Raised when a requested resource is not found."""

    status_code = 404
    default_detail = "Resource not found"


class AuthenticationError(BookReviewsError):
    """Raised when authentication is required but not provided or invalid."""

    status_code = 401
    default_detail = "Could not validate credentials"


class AuthorizationError(BookReviewsError):
    """Raised when the user lacks permission for an operation."""

    status_code = 403
    default_detail = "Not authorized to perform this action"


class ConflictError(BookReviewsError):
    """Raised when a write would violate a uniqueness rule."""

    status_code = 409
    default_detail = "Resource already exists"


class RatingSyncError(BookReviewsError):
    """
    Raised when a book's cached rating summary could not be recomputed.

    The review mutation that triggered the recomputation has been rolled
    back with it, so the caller may simply retry.
    """

    status_code = 503

    def __init__(self, book_id: int) -> None:
        self.book_id = book_id
        super().__init__(
            f"Could not update the rating summary for book {book_id}; "
            "the change was not saved. Please retry."
        )
