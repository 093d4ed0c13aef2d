"""
FastAPI Dependencies Module

Reusable components injected into route handlers with Depends():
- Database session (one per request)
- Pagination and catalog filter query parameters
- The authenticated user, from the JWT bearer token

Dependencies raise the domain exceptions of bookreviews.exceptions; the
handler registered in main.create_app() renders them.
"""

from typing import Annotated

from fastapi import Depends, Query
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from bookreviews.config import get_settings
from bookreviews.database import get_db
from bookreviews.exceptions import AuthenticationError, NotFoundError
from bookreviews.models import User
from bookreviews.schemas.book import BookSort
from bookreviews.services.security import decode_token

settings = get_settings()

# Instead of `db: Session = Depends(get_db)` routes write `db: DbSession`
DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

        GET /api/v1/books/?page=2&page_size=5

    - page: Which page to return (1-indexed)
    - page_size: How many items per page (default 5)
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        page_size: int = Query(
            default=settings.default_page_size,
            ge=1,
            le=settings.max_page_size,
            description=f"Number of items per page (max {settings.max_page_size})",
            examples=[5, 10, 25],
        ),
    ) -> None:
        self.page = page
        self.page_size = page_size


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Book Catalog Filters
# =============================================================================
class BookFilterParams:
    """
    Search, filter and sort parameters for the catalog listing.

        GET /api/v1/books/?q=orwell&genre=Fiction&sort_by=rating
    """

    def __init__(
        self,
        q: str | None = Query(
            default=None,
            max_length=100,
            description="Case-insensitive search in title and author",
            examples=["orwell", "dune"],
        ),
        genre: str | None = Query(
            default=None,
            description="Only books of this genre; empty or \"All\" for every genre",
            examples=["Fiction", "All"],
        ),
        sort_by: BookSort = Query(
            default=BookSort.NEWEST,
            description="newest (default), year or rating; all descending",
        ),
    ) -> None:
        self.q = q
        self.genre = genre
        self.sort_by = sort_by


BookFilters = Annotated[BookFilterParams, Depends()]


# =============================================================================
# Lookups
# =============================================================================
def get_user_or_404(db: Session, user_id: int) -> User:
    """Get a user by ID or raise NotFoundError."""
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User with id {user_id} not found")
    return user


# =============================================================================
# JWT Authentication
# =============================================================================
# Extracts "Authorization: Bearer <token>" and adds the Authorize button to
# Swagger UI. auto_error=False so a missing token becomes AuthenticationError.
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,
)


def get_current_user(
    db: DbSession,
    token: str | None = Depends(oauth2_scheme),
) -> User:
    """
    Resolve the user from the JWT bearer token.

    Raises:
        AuthenticationError: If the token is missing, invalid, expired or
            names a user that no longer exists
    """
    if not token:
        raise AuthenticationError("Not authenticated")

    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError()

    user_id = payload.get("sub")
    if user_id is None or not str(user_id).isdigit():
        raise AuthenticationError()

    user = db.get(User, int(user_id))
    if user is None:
        raise AuthenticationError()

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        AuthenticationError: If the account has been deactivated
    """
    if not current_user.is_active:
        raise AuthenticationError("Account is inactive")
    return current_user


ActiveUser = Annotated[User, Depends(get_current_active_user)]
