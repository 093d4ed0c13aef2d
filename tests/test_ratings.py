"""
Tests for the Ratings Service

- Rounding of the average
- Summary kept in sync by every review change
- Idempotent recalculation
- Stale concurrent write and its repair by reconciliation
- Rating statistics endpoint
"""

from decimal import Decimal

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookreviews.exceptions import NotFoundError
from bookreviews.models import Book, Review, User
from bookreviews.services import reviews
from bookreviews.services.ratings import (
    RatingSummary,
    apply_rating_summary,
    compute_rating_summary,
    get_rating_stats,
    recalculate_all_book_ratings,
    recalculate_book_rating,
    round_rating,
)


def add_ratings(db: Session, book: Book, make_user, ratings: list[int]) -> list[Review]:
    """Have a fresh user review `book` once per rating."""
    created = []
    for i, rating in enumerate(ratings):
        user = make_user(f"Reviewer {i}", f"reviewer{i}@example.com")
        created.append(
            reviews.create_review(
                db, book.id, author_id=user.id, rating=rating,
                review_text=f"Review number {i} with enough text.",
            )
        )
    return created


# =============================================================================
# Rounding
# =============================================================================


class TestRoundRating:
    """Tests for round_rating()"""

    @pytest.mark.parametrize(
        "ratings,expected",
        [
            ([4, 5, 3], Decimal("4.0")),
            ([5], Decimal("5.0")),
            ([3, 4], Decimal("3.5")),
            ([4, 4, 4, 5], Decimal("4.3")),
            ([1, 2, 2], Decimal("1.7")),
            ([5, 5, 4, 4, 4, 4, 4, 4], Decimal("4.3")),  # 4.25 rounds up
        ],
    )
    def test_average_rounded_to_one_decimal(self, ratings, expected):
        assert round_rating(sum(ratings), len(ratings)) == expected

    def test_no_ratings_is_zero(self):
        assert round_rating(0, 0) == Decimal("0")


# =============================================================================
# Summary Maintenance
# =============================================================================


class TestRatingSummary:
    """The cached summary follows every review change."""

    def test_new_book_has_zero_summary(self, sample_book: Book):
        assert sample_book.average_rating == Decimal("0")
        assert sample_book.review_count == 0

    def test_three_reviews(self, db_session: Session, sample_book: Book, make_user):
        add_ratings(db_session, sample_book, make_user, [4, 5, 3])

        book = db_session.get(Book, sample_book.id)
        assert book.average_rating == Decimal("4.0")
        assert book.review_count == 3

    def test_update_changes_average(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        reviews.update_review(db_session, sample_review.id, second_user.id, rating=2)

        book = db_session.get(Book, sample_review.book_id)
        assert book.average_rating == Decimal("2.0")
        assert book.review_count == 1

    def test_deleting_last_review_resets_summary(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        book_id = sample_review.book_id
        reviews.delete_review(db_session, sample_review.id, second_user.id)

        book = db_session.get(Book, book_id)
        assert book.average_rating == Decimal("0")
        assert book.review_count == 0

    def test_compute_sees_pending_writes(
        self, db_session: Session, sample_book: Book, second_user: User
    ):
        """Uncommitted reviews in the session are counted."""
        db_session.add(Review(
            book_id=sample_book.id,
            user_id=second_user.id,
            rating=3,
            review_text="Pending review that is not committed.",
        ))

        summary = compute_rating_summary(db_session, sample_book.id)

        assert summary == RatingSummary(average_rating=Decimal("3.0"), review_count=1)
        db_session.rollback()

    def test_recalculate_missing_book(self, db_session: Session):
        with pytest.raises(NotFoundError):
            recalculate_book_rating(db_session, 99999)


class TestIdempotence:
    """Recalculating an up-to-date book changes nothing."""

    def test_apply_same_summary_is_noop(self, db_session: Session, sample_review: Review):
        book = db_session.get(Book, sample_review.book_id)
        summary = compute_rating_summary(db_session, book.id)

        assert apply_rating_summary(book, summary) is False
        assert not db_session.is_modified(book)

    def test_recalculate_twice_keeps_values_and_timestamp(
        self, db_session: Session, sample_review: Review
    ):
        book_id = sample_review.book_id
        book = db_session.get(Book, book_id)
        updated_at = book.updated_at

        first = recalculate_book_rating(db_session, book_id)
        db_session.commit()
        second = recalculate_book_rating(db_session, book_id)
        db_session.commit()

        book = db_session.get(Book, book_id)
        assert first == second
        assert book.average_rating == Decimal("4.0")
        assert book.review_count == 1
        assert book.updated_at == updated_at


# =============================================================================
# Concurrency Window and Reconciliation
# =============================================================================


class TestReconciliation:
    """Last aggregation write wins; the sweep repairs it."""

    def test_stale_summary_write_is_repaired(
        self, db_session: Session, sample_review: Review, make_user
    ):
        book_id = sample_review.book_id

        # Request A computes its summary before request B's review commits
        stale = compute_rating_summary(db_session, book_id)
        late_reviewer = make_user("Late Reviewer", "late@example.com")
        reviews.create_review(
            db_session, book_id, author_id=late_reviewer.id, rating=1,
            review_text="Did not enjoy this at all.",
        )

        # ...and writes it last
        book = db_session.get(Book, book_id)
        apply_rating_summary(book, stale)
        db_session.commit()

        book = db_session.get(Book, book_id)
        assert book.review_count == 1
        assert book.average_rating == Decimal("4.0")

        corrected = recalculate_all_book_ratings(db_session)

        book = db_session.get(Book, book_id)
        assert corrected == 1
        assert book.review_count == 2
        assert book.average_rating == Decimal("2.5")

    def test_nothing_to_correct(self, db_session: Session, sample_review: Review):
        assert recalculate_all_book_ratings(db_session) == 0


# =============================================================================
# Rating Statistics
# =============================================================================


class TestRatingStats:
    """Tests for get_rating_stats() and GET /api/v1/books/{book_id}/rating"""

    def test_distribution(self, db_session: Session, sample_book: Book, make_user):
        add_ratings(db_session, sample_book, make_user, [5, 5, 3])

        stats = get_rating_stats(db_session, sample_book.id)

        assert stats.average_rating == pytest.approx(4.3)
        assert stats.total_reviews == 3
        assert stats.rating_distribution == {1: 0, 2: 0, 3: 1, 4: 0, 5: 2}

    def test_stats_endpoint(self, client: TestClient, sample_review: Review):
        response = client.get(f"/api/v1/books/{sample_review.book_id}/rating")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["average_rating"] == 4.0
        assert data["total_reviews"] == 1
        assert data["rating_distribution"]["4"] == 1

    def test_stats_book_not_found(self, client: TestClient):
        response = client.get("/api/v1/books/99999/rating")

        assert response.status_code == status.HTTP_404_NOT_FOUND
