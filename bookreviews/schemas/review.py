"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Update an existing review (rating and/or text)
- ReviewResponse: Review with populated author and book references
- ReviewListResponse: Paginated list of reviews
- BookRatingStats: Cached rating summary plus the rating distribution

Business Rules:
- Rating must be 1-5 (validated at schema level)
- Review text must be 10-1000 characters after trimming
- One review per user per book (enforced at database level)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookreviews.schemas.book import BookSummary
from bookreviews.schemas.user import UserSummary

MIN_REVIEW_LENGTH = 10
MAX_REVIEW_LENGTH = 1000


class ReviewCreate(BaseModel):
    """
    Schema for creating a new review.

    Example request body:
    {
        "rating": 5,
        "review_text": "One of the best books I've ever read."
    }
    """

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    review_text: str = Field(
        ...,
        min_length=MIN_REVIEW_LENGTH,
        max_length=MAX_REVIEW_LENGTH,
        description="Review text (10-1000 characters)",
        examples=["This book changed my perspective on..."],
    )

    @field_validator("review_text", mode="before")
    @classmethod
    def strip_review_text(cls, v):
        """Trim surrounding whitespace before the length check."""
        return v.strip() if isinstance(v, str) else v


class ReviewUpdate(BaseModel):
    """
    Schema for updating an existing review.

    Both fields are optional. The book and author of a review never change,
    so any other field is rejected.
    """

    rating: int | None = Field(
        default=None,
        ge=1,
        le=5,
        description="Rating from 1 to 5 stars",
    )

    review_text: str | None = Field(
        default=None,
        min_length=MIN_REVIEW_LENGTH,
        max_length=MAX_REVIEW_LENGTH,
        description="Review text (10-1000 characters)",
    )

    model_config = ConfigDict(extra="forbid")

    @field_validator("review_text", mode="before")
    @classmethod
    def strip_review_text(cls, v):
        """Trim surrounding whitespace before the length check."""
        return v.strip() if isinstance(v, str) else v


class ReviewResponse(BaseModel):
    """
    Schema for review responses.

    Includes:
    - Review data (rating, text)
    - Database fields (id, timestamps)
    - Populated author and book references
    """

    id: int = Field(..., description="Unique review identifier")
    book_id: int = Field(..., description="ID of the reviewed book")
    user_id: int = Field(..., description="ID of the user who wrote the review")
    rating: int = Field(..., description="Rating from 1 to 5 stars")
    review_text: str = Field(..., description="Review text")
    created_at: datetime = Field(..., description="When the review was created")
    updated_at: datetime = Field(..., description="When the review was last updated")

    user: UserSummary = Field(..., description="User who wrote the review")
    book: BookSummary = Field(..., description="Book being reviewed")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "book_id": 42,
                "user_id": 7,
                "rating": 5,
                "review_text": "This book completely changed my perspective on...",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "user": {"id": 7, "name": "Jane Doe", "email": "jane@example.com"},
                "book": {"id": 42, "title": "1984", "author": "George Orwell"},
            }
        },
    )


class ReviewListResponse(BaseModel):
    """Schema for paginated review list responses."""

    items: list[ReviewResponse] = Field(..., description="Reviews on this page")
    page: int = Field(..., ge=1, description="Current page number")
    page_size: int = Field(..., ge=1, description="Number of items per page")
    total: int = Field(..., ge=0, description="Total number of reviews")
    total_pages: int = Field(..., ge=0, description="Total number of pages")


# =============================================================================
# Aggregation Schemas
# =============================================================================


class BookRatingStats(BaseModel):
    """
    Rating statistics for a book.

    average_rating and total_reviews are the book's cached summary;
    rating_distribution counts reviews per star value.
    """

    book_id: int = Field(..., description="Book ID")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average rating (0-5, 0 means no reviews)"
    )
    total_reviews: int = Field(..., ge=0, description="Total number of reviews")
    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "book_id": 42,
                "average_rating": 4.2,
                "total_reviews": 125,
                "rating_distribution": {"1": 5, "2": 10, "3": 20, "4": 40, "5": 50},
            }
        },
    )
