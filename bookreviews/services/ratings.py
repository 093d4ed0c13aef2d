"""
Ratings Service

Maintains the cached rating summary stored on each Book:
- average_rating: mean of the book's review ratings, one decimal place
- review_count: number of reviews

The summary is derived data. The review ledger calls
recalculate_book_rating() after every review create/update/delete, inside
the same transaction as the mutation, so the cached values always match
the reviews that were committed with them. Readers only ever see the
stored values.

Rounding:
    The mean is rounded to one decimal place, half away from zero
    (ROUND_HALF_UP on exact decimals): [3, 4] → 3.5, [4, 4, 4, 5] → 4.3.

Concurrency:
    Two requests mutating reviews of the same book can both compute a
    summary before either commits; the later write wins and may be one
    review behind. recalculate_all_book_ratings() repairs any such drift
    (see scripts/reconcile_ratings.py).
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookreviews.exceptions import NotFoundError
from bookreviews.models import Book, Review
from bookreviews.schemas.review import BookRatingStats

logger = logging.getLogger(__name__)

RATING_QUANTUM = Decimal("0.1")
NO_RATING = Decimal("0.0")


@dataclass(frozen=True)
class RatingSummary:
    """A book's derived rating values."""

    average_rating: Decimal
    review_count: int


def round_rating(total: int, count: int) -> Decimal:
    """
    Average of `count` ratings summing to `total`, rounded to one decimal.

    Args:
        total: Sum of the ratings
        count: Number of ratings

    Returns:
        Decimal with one decimal place; 0.0 when there are no ratings

    Example:
        >>> round_rating(7, 2)
        Decimal('3.5')
        >>> round_rating(17, 4)
        Decimal('4.3')
    """
    if count == 0:
        return NO_RATING
    mean = Decimal(total) / Decimal(count)
    return mean.quantize(RATING_QUANTUM, rounding=ROUND_HALF_UP)


def compute_rating_summary(db: Session, book_id: int) -> RatingSummary:
    """
    Read a book's reviews and compute its summary.

    Pending changes in the session are flushed first, so the result
    always reflects the caller's own uncommitted review writes.
    """
    db.flush()

    stmt = select(
        func.coalesce(func.sum(Review.rating), 0),
        func.count(Review.id),
    ).where(Review.book_id == book_id)
    total, count = db.execute(stmt).one()

    return RatingSummary(
        average_rating=round_rating(int(total), count),
        review_count=count,
    )


def apply_rating_summary(book: Book, summary: RatingSummary) -> bool:
    """
    Write a summary onto a book.

    Only assigns when a value differs, so re-applying the same summary
    issues no UPDATE and leaves updated_at untouched.

    Returns:
        True if the book was changed
    """
    changed = False
    if book.average_rating is None or Decimal(book.average_rating) != summary.average_rating:
        book.average_rating = summary.average_rating
        changed = True
    if book.review_count != summary.review_count:
        book.review_count = summary.review_count
        changed = True
    return changed


def recalculate_book_rating(db: Session, book_id: int) -> RatingSummary:
    """
    Recalculate and store a book's rating summary.

    Called after any review create/update/delete operation to keep
    the cached fields in sync.

    Args:
        db: Database session
        book_id: ID of the book to update

    Returns:
        The summary now stored on the book

    Raises:
        NotFoundError: If the book does not exist

    Note:
        This function flushes but does not commit. The caller commits the
        review change and the new summary together.
    """
    book = db.get(Book, book_id)
    if book is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    summary = compute_rating_summary(db, book_id)
    if apply_rating_summary(book, summary):
        db.flush()
        logger.debug(
            f"Book {book_id} rating updated: "
            f"average={summary.average_rating} count={summary.review_count}"
        )
    return summary


def recalculate_all_book_ratings(db: Session) -> int:
    """
    Recalculate rating summaries for all books and commit.

    Reconciliation sweep for summaries that drifted (lost concurrent
    updates, out-of-band writes, data imports).

    Args:
        db: Database session

    Returns:
        Number of books whose stored summary was corrected
    """
    book_ids = db.execute(select(Book.id).order_by(Book.id)).scalars().all()

    corrected = 0
    for book_id in book_ids:
        book = db.get(Book, book_id)
        if apply_rating_summary(book, compute_rating_summary(db, book_id)):
            corrected += 1
            logger.warning(f"Book {book_id} had a stale rating summary; corrected")

    db.commit()
    logger.info(f"Rating reconciliation checked {len(book_ids)} books, corrected {corrected}")
    return corrected


def get_rating_stats(db: Session, book_id: int) -> BookRatingStats:
    """
    Rating statistics for a book.

    The average and count are the book's cached summary; the
    distribution counts reviews per star value.

    Raises:
        NotFoundError: If the book does not exist
    """
    book = db.get(Book, book_id)
    if book is None:
        raise NotFoundError(f"Book with id {book_id} not found")

    distribution = {1: 0, 2: 0, 3: 0, 4: 0, 5: 0}
    dist_stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.book_id == book_id)
        .group_by(Review.rating)
    )
    for rating, count in db.execute(dist_stmt).all():
        distribution[rating] = count

    return BookRatingStats(
        book_id=book_id,
        average_rating=float(book.average_rating),
        total_reviews=book.review_count,
        rating_distribution=distribution,
    )
