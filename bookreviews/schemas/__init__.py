"""
Pydantic Schemas Package

Request/response models, kept separate from the SQLAlchemy models so the
API controls exactly what is accepted and exposed.

Schema Naming Convention:
- XxxCreate: Fields required when creating a record
- XxxUpdate: Fields allowed when updating (all optional, extras rejected)
- XxxResponse: Fields returned in API responses
- XxxSummary: Populated reference embedded in another response
- XxxListResponse: Paginated list envelope
"""

from bookreviews.schemas.user import (
    TokenResponse,
    UserCreate,
    UserResponse,
    UserSummary,
)
from bookreviews.schemas.book import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookSort,
    BookSummary,
    BookUpdate,
)
from bookreviews.schemas.review import (
    BookRatingStats,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)

__all__ = [
    # User schemas
    "UserCreate",
    "UserResponse",
    "UserSummary",
    "TokenResponse",
    # Book schemas
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookSummary",
    "BookListResponse",
    "BookSort",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "BookRatingStats",
]
