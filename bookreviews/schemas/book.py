"""
Book Pydantic Schemas

Handles:
- Field trimming and length limits
- Genre restricted to the fixed Genre enum
- Publication year between 1000 and the current year
- Read-only cached rating fields (present in responses, rejected in updates)
- Pagination for list responses
"""

from datetime import UTC, datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookreviews.models.book import Genre
from bookreviews.schemas.user import UserSummary

MIN_PUBLISHED_YEAR = 1000


class BookSort(str, Enum):
    """Sort orders offered by the catalog listing."""
    NEWEST = "newest"  # created_at, newest first
    YEAR = "year"  # published_year, most recent first
    RATING = "rating"  # average_rating, best first


def _strip_required(v: str, field: str) -> str:
    if not v.strip():
        raise ValueError(f"{field} cannot be empty or whitespace")
    return v.strip()


def _check_published_year(v: int) -> int:
    current_year = datetime.now(UTC).year
    if v > current_year:
        raise ValueError("Year cannot be in the future")
    return v


class BookBase(BaseModel):
    """
    Base schema with shared book fields.

    Every field is required when creating a book.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Book title",
        examples=["1984", "Pride and Prejudice"],
    )

    author: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Author name",
        examples=["George Orwell"],
    )

    description: str = Field(
        ...,
        min_length=1,
        max_length=2000,
        description="Book description or summary",
        examples=["A dystopian novel set in a totalitarian society..."],
    )

    genre: Genre = Field(
        ...,
        description="Genre (one of the fixed genre list)",
        examples=["Fiction", "Science Fiction"],
    )

    published_year: int = Field(
        ...,
        ge=MIN_PUBLISHED_YEAR,
        description="Year of publication (1000 to current year)",
        examples=[1949],
    )

    @field_validator("title")
    @classmethod
    def title_must_not_be_empty(cls, v: str) -> str:
        return _strip_required(v, "Title")

    @field_validator("author")
    @classmethod
    def author_must_not_be_empty(cls, v: str) -> str:
        return _strip_required(v, "Author")

    @field_validator("description")
    @classmethod
    def description_must_not_be_empty(cls, v: str) -> str:
        return _strip_required(v, "Description")

    @field_validator("published_year")
    @classmethod
    def year_not_in_future(cls, v: int) -> int:
        return _check_published_year(v)


class BookCreate(BookBase):
    """
    Schema for creating a new book.

    Example request body:
    {
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian novel...",
        "genre": "Fiction",
        "published_year": 1949
    }
    """

    pass


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional for PATCH-style updates. Unknown fields are
    rejected, which keeps average_rating and review_count out of reach.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=1, max_length=100)
    description: str | None = Field(default=None, min_length=1, max_length=2000)
    genre: Genre | None = Field(default=None)
    published_year: int | None = Field(default=None, ge=MIN_PUBLISHED_YEAR)

    model_config = ConfigDict(extra="forbid")

    @field_validator("title", "author", "description")
    @classmethod
    def text_must_not_be_empty(cls, v: str | None) -> str | None:
        """Validate text fields if provided."""
        if v is None:
            return v
        return _strip_required(v, "Field")

    @field_validator("published_year")
    @classmethod
    def year_not_in_future(cls, v: int | None) -> int | None:
        if v is None:
            return v
        return _check_published_year(v)


class BookSummary(BaseModel):
    """
    Minimal book info for embedding in review responses.

    Just enough to identify the book without its description.
    """

    id: int = Field(..., description="Book ID")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author name")

    model_config = ConfigDict(from_attributes=True)


class BookResponse(BaseModel):
    """
    Schema for book responses.

    Includes the database fields, the cached rating summary and the
    populated owner reference.
    """

    id: int = Field(..., description="Unique identifier")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author name")
    description: str = Field(..., description="Book description or summary")
    genre: Genre = Field(..., description="Genre")
    published_year: int = Field(..., description="Year of publication")
    owner_id: int = Field(..., description="ID of the user who added the book")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average review rating (0-5, 0 means no reviews)",
    )
    review_count: int = Field(..., ge=0, description="Number of reviews")
    created_at: datetime = Field(..., description="When the book was added")
    updated_at: datetime = Field(..., description="When the book was last updated")

    owner: UserSummary = Field(..., description="User who added the book")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "1984",
                "author": "George Orwell",
                "description": "A dystopian novel about totalitarianism",
                "genre": "Fiction",
                "published_year": 1949,
                "owner_id": 7,
                "average_rating": 4.3,
                "review_count": 12,
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "owner": {"id": 7, "name": "Jane Doe", "email": "jane@example.com"},
            }
        },
    )


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    - total: Total number of books matching the query
    - page: Current page number
    - page_size: Number of items per page
    - total_pages: Total number of pages
    """

    items: list[BookResponse] = Field(..., description="Books on this page")
    page: int = Field(..., ge=1, description="Current page number")
    page_size: int = Field(..., ge=1, description="Number of items per page")
    total: int = Field(..., ge=0, description="Total number of matching books")
    total_pages: int = Field(..., ge=0, description="Total number of pages")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [],
                "page": 1,
                "page_size": 5,
                "total": 12,
                "total_pages": 3,
            }
        },
    )
