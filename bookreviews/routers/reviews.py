"""
Reviews Router

Endpoints:
- GET /books/{book_id}/reviews - List reviews for a book
- POST /books/{book_id}/reviews - Create a review (authenticated)
- GET /books/{book_id}/rating - Rating summary and distribution
- GET /reviews/{review_id} - Get a specific review
- PUT /reviews/{review_id} - Update a review (author only)
- DELETE /reviews/{review_id} - Delete a review (author only)
- GET /users/{user_id}/reviews - Reviews written by a user

Business Rules:
- One review per user per book
- Only the review author can update or delete their review
- Every change refreshes the book's cached rating before it is committed
"""

import logging

from fastapi import APIRouter, Request, status

from bookreviews.config import get_settings
from bookreviews.dependencies import ActiveUser, DbSession, Pagination
from bookreviews.schemas.review import (
    BookRatingStats,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from bookreviews.services import reviews as ledger
from bookreviews.services.rate_limiter import limiter
from bookreviews.services.ratings import get_rating_stats
from bookreviews.utils.pagination import total_pages

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    tags=["Reviews"],
    responses={
        404: {"description": "Review or book not found"},
    },
)


def _review_page(reviews, total: int, pagination) -> ReviewListResponse:
    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in reviews],
        page=pagination.page,
        page_size=pagination.page_size,
        total=total,
        total_pages=total_pages(total, pagination.page_size),
    )


# =============================================================================
# Book Review Endpoints
# =============================================================================


@router.get(
    "/books/{book_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews for a book",
    description="Get a paginated list of reviews for a book, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_book_reviews(
    request: Request,
    book_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    """List reviews of one book with author info."""
    reviews, total = ledger.list_book_reviews(
        db, book_id, page=pagination.page, page_size=pagination.page_size
    )
    return _review_page(reviews, total, pagination)


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a review",
    description="Review a book. Requires authentication. One review per book per user.",
    responses={
        409: {"description": "You have already reviewed this book"},
        503: {"description": "Rating summary could not be updated; retry"},
    },
)
@limiter.limit(settings.rate_limit_write)
def create_review(
    request: Request,
    book_id: int,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """Create a review written by the authenticated user."""
    review = ledger.create_review(
        db,
        book_id,
        author_id=current_user.id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return ReviewResponse.model_validate(review)


@router.get(
    "/books/{book_id}/rating",
    response_model=BookRatingStats,
    summary="Get book rating statistics",
    description="The book's average rating, review count and rating distribution.",
)
@limiter.limit(settings.rate_limit_default)
def get_book_rating_stats(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookRatingStats:
    """Rating summary of a book."""
    return get_rating_stats(db, book_id)


# =============================================================================
# Individual Review Endpoints
# =============================================================================


@router.get(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
) -> ReviewResponse:
    """Get a specific review by ID."""
    return ReviewResponse.model_validate(ledger.get_review(db, review_id))


@router.put(
    "/reviews/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Change the rating and/or text of your review.",
    responses={
        403: {"description": "Not the author of the review"},
        503: {"description": "Rating summary could not be updated; retry"},
    },
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """Update a review. Only the author can update it."""
    review = ledger.update_review(
        db,
        review_id,
        requester_id=current_user.id,
        rating=review_data.rating,
        review_text=review_data.review_text,
    )
    return ReviewResponse.model_validate(review)


@router.delete(
    "/reviews/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    description="Delete your review. The book's rating is updated.",
    responses={
        403: {"description": "Not the author of the review"},
        503: {"description": "Rating summary could not be updated; retry"},
    },
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Delete a review. Only the author can delete it."""
    ledger.delete_review(db, review_id, requester_id=current_user.id)


# =============================================================================
# User Review Endpoints
# =============================================================================


@router.get(
    "/users/{user_id}/reviews",
    response_model=ReviewListResponse,
    summary="List reviews by a user",
    description="Get a paginated list of reviews written by a user, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_user_reviews(
    request: Request,
    user_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    """List reviews written by one user."""
    reviews, total = ledger.list_user_reviews(
        db, user_id, page=pagination.page, page_size=pagination.page_size
    )
    return _review_page(reviews, total, pagination)
