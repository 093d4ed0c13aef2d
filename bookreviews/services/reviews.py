"""
Reviews Service

The review ledger: one review per (book, user) pair, and the source of
truth for every book's rating.

Every create/update/delete runs as a single unit of work:
    mutate → flush → recalculate the book's rating → commit

If the rating recalculation fails, the session is rolled back (the review
change is discarded with it) and RatingSyncError is raised, so the cached
summary never silently diverges from the reviews.

Business Rules:
- One review per user per book (pre-checked for a friendly message and
  enforced by the uq_review_book_user constraint for concurrent requests)
- Only the author can update or delete a review
- Book and author of a review never change
"""

import logging
from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bookreviews.exceptions import ConflictError, NotFoundError, RatingSyncError
from bookreviews.models import Book, Review, User
from bookreviews.schemas.review import ReviewCreate, ReviewUpdate
from bookreviews.services.permissions import authorize
from bookreviews.services.ratings import RatingSummary, recalculate_book_rating
from bookreviews.utils.pagination import page_offset
from bookreviews.utils.validation import validate_input

logger = logging.getLogger(__name__)

DUPLICATE_REVIEW_DETAIL = (
    "You have already reviewed this book. Please update your existing review."
)


# =============================================================================
# Helpers
# =============================================================================


def _review_query():
    """Select reviews with their author and book populated."""
    return select(Review).options(selectinload(Review.user), selectinload(Review.book))


def _refresh_book_rating(db: Session, book_id: int) -> RatingSummary:
    """Recalculate a book's rating, rolling back everything on failure."""
    try:
        return recalculate_book_rating(db, book_id)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Rating recalculation failed for book {book_id}: {exc}")
        raise RatingSyncError(book_id) from exc


def _paginate(db: Session, stmt, page: int, page_size: int) -> tuple[list[Review], int]:
    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0

    page_stmt = (
        stmt.order_by(Review.created_at.desc(), Review.id.desc())
        .offset(page_offset(page, page_size))
        .limit(page_size)
    )
    return list(db.execute(page_stmt).scalars().all()), total


# =============================================================================
# Reads
# =============================================================================


def get_review(db: Session, review_id: int) -> Review:
    """
    Get a review by ID with author and book loaded.

    Raises:
        NotFoundError: If the review does not exist
    """
    review = db.execute(
        _review_query().where(Review.id == review_id)
    ).scalar_one_or_none()

    if review is None:
        raise NotFoundError(f"Review with id {review_id} not found")
    return review


def find_review(db: Session, book_id: int, user_id: int) -> Review | None:
    """Return the review `user_id` wrote for `book_id`, if any."""
    stmt = select(Review).where(
        Review.book_id == book_id,
        Review.user_id == user_id,
    )
    return db.execute(stmt).scalar_one_or_none()


def list_book_reviews(
    db: Session,
    book_id: int,
    page: int = 1,
    page_size: int = 5,
) -> tuple[list[Review], int]:
    """
    Reviews of a book, newest first.

    Returns:
        (reviews on the requested page, total number of reviews)

    Raises:
        NotFoundError: If the book does not exist
    """
    if db.get(Book, book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    stmt = _review_query().where(Review.book_id == book_id)
    return _paginate(db, stmt, page, page_size)


def list_user_reviews(
    db: Session,
    user_id: int,
    page: int = 1,
    page_size: int = 5,
) -> tuple[list[Review], int]:
    """
    Reviews written by a user, newest first.

    Raises:
        NotFoundError: If the user does not exist
    """
    if db.get(User, user_id) is None:
        raise NotFoundError(f"User with id {user_id} not found")

    stmt = _review_query().where(Review.user_id == user_id)
    return _paginate(db, stmt, page, page_size)


# =============================================================================
# Mutations
# =============================================================================


def create_review(
    db: Session,
    book_id: int,
    author_id: int,
    rating: int,
    review_text: str,
) -> Review:
    """
    Create a review and update the book's rating.

    Args:
        db: Database session
        book_id: Book being reviewed
        author_id: Authenticated user writing the review
        rating: 1-5
        review_text: 10-1000 characters

    Returns:
        The created review with author and book populated

    Raises:
        ValidationError: If rating or text is out of range
        NotFoundError: If the book does not exist
        ConflictError: If the user already reviewed this book
        RatingSyncError: If the book's rating could not be updated
    """
    data = validate_input(ReviewCreate, rating=rating, review_text=review_text)

    if db.get(Book, book_id) is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    if find_review(db, book_id, author_id) is not None:
        raise ConflictError(DUPLICATE_REVIEW_DETAIL)

    review = Review(
        book_id=book_id,
        user_id=author_id,
        rating=data.rating,
        review_text=data.review_text,
    )
    db.add(review)

    # A concurrent request may have inserted the same pair after our check.
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError(DUPLICATE_REVIEW_DETAIL) from exc

    review_id = review.id
    summary = _refresh_book_rating(db, book_id)
    db.commit()

    logger.info(
        f"Review {review_id} created for book {book_id} by user {author_id} "
        f"(average now {summary.average_rating} over {summary.review_count})"
    )
    return get_review(db, review_id)


def update_review(
    db: Session,
    review_id: int,
    requester_id: int,
    rating: int | None = None,
    review_text: str | None = None,
) -> Review:
    """
    Update the rating and/or text of a review.

    Only the given fields change; updated_at is always refreshed and the
    book's rating is recalculated.

    Raises:
        NotFoundError: If the review does not exist
        AuthorizationError: If the requester is not the author
        ValidationError: If a field is out of range
        RatingSyncError: If the book's rating could not be updated
    """
    review = get_review(db, review_id)
    authorize(requester_id, review, "update")

    changes = validate_input(
        ReviewUpdate, rating=rating, review_text=review_text
    ).model_dump(exclude_none=True)

    for field, value in changes.items():
        setattr(review, field, value)
    review.updated_at = datetime.now(UTC)

    book_id = review.book_id
    _refresh_book_rating(db, book_id)
    db.commit()

    logger.info(f"Review {review_id} updated by user {requester_id}: {sorted(changes)}")
    return get_review(db, review_id)


def delete_review(db: Session, review_id: int, requester_id: int) -> None:
    """
    Delete a review and update the book's rating.

    Raises:
        NotFoundError: If the review does not exist
        AuthorizationError: If the requester is not the author
        RatingSyncError: If the book's rating could not be updated
    """
    review = get_review(db, review_id)
    authorize(requester_id, review, "delete")

    book_id = review.book_id
    db.delete(review)

    _refresh_book_rating(db, book_id)
    db.commit()

    logger.info(f"Review {review_id} deleted by user {requester_id}")


def delete_all_for_book(db: Session, book_id: int) -> int:
    """
    Bulk-delete every review of a book that is being removed.

    No rating recalculation happens: the book itself is deleted next.
    Does not commit; the book deletion commits both steps together.

    Returns:
        Number of reviews deleted
    """
    result = db.execute(delete(Review).where(Review.book_id == book_id))
    return result.rowcount


def purge_orphaned_reviews(db: Session) -> int:
    """
    Delete reviews whose book no longer exists, and commit.

    Reconciliation sweep for data written before book deletion was
    transactional, or by tools that bypass the services.

    Returns:
        Number of reviews deleted
    """
    stmt = delete(Review).where(Review.book_id.not_in(select(Book.id)))
    result = db.execute(stmt, execution_options={"synchronize_session": "fetch"})
    db.commit()

    if result.rowcount:
        logger.warning(f"Purged {result.rowcount} orphaned reviews")
    return result.rowcount
