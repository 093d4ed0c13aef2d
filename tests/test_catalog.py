"""
Tests for the Catalog Service

Book validation, ownership, transactional deletion and the listing
(search, genre filter, sort, pagination).
"""

from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from bookreviews.exceptions import AuthorizationError, NotFoundError, ValidationError
from bookreviews.models import Book, Genre, Review, User
from bookreviews.schemas.book import BookSort
from bookreviews.services import catalog, reviews

BOOK_FIELDS = {
    "title": "Dune",
    "author": "Frank Herbert",
    "description": "Politics and ecology on a desert planet.",
    "genre": Genre.SCIENCE_FICTION,
    "published_year": 1965,
}


class TestCreateBook:
    """Tests for catalog.create_book()"""

    def test_create_initializes_summary(self, db_session: Session, sample_user: User):
        book = catalog.create_book(db_session, owner_id=sample_user.id, **BOOK_FIELDS)

        assert book.id is not None
        assert book.average_rating == Decimal("0")
        assert book.review_count == 0
        assert book.owner.email == "testuser@example.com"
        assert book.genre == "Science Fiction"

    def test_fields_are_trimmed(self, db_session: Session, sample_user: User):
        fields = {**BOOK_FIELDS, "title": "  Dune  ", "author": " Frank Herbert "}

        book = catalog.create_book(db_session, owner_id=sample_user.id, **fields)

        assert book.title == "Dune"
        assert book.author == "Frank Herbert"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("title", "   "),
            ("author", ""),
            ("description", "   "),
            ("genre", "Poetry"),
            ("published_year", 999),
            ("published_year", datetime.now(UTC).year + 1),
        ],
    )
    def test_invalid_field(self, db_session: Session, sample_user: User, field, value):
        fields = {**BOOK_FIELDS, field: value}

        with pytest.raises(ValidationError) as exc_info:
            catalog.create_book(db_session, owner_id=sample_user.id, **fields)

        assert exc_info.value.errors[0]["field"] == field
        assert db_session.execute(select(func.count(Book.id))).scalar() == 0

    def test_future_year_message(self, db_session: Session, sample_user: User):
        fields = {**BOOK_FIELDS, "published_year": datetime.now(UTC).year + 5}

        with pytest.raises(ValidationError) as exc_info:
            catalog.create_book(db_session, owner_id=sample_user.id, **fields)

        assert exc_info.value.errors[0]["message"] == "Year cannot be in the future"

    def test_current_year_allowed(self, db_session: Session, sample_user: User):
        fields = {**BOOK_FIELDS, "published_year": datetime.now(UTC).year}

        book = catalog.create_book(db_session, owner_id=sample_user.id, **fields)

        assert book.published_year == datetime.now(UTC).year


class TestUpdateBook:
    """Tests for catalog.update_book()"""

    def test_partial_update(self, db_session: Session, sample_book: Book, sample_user: User):
        book = catalog.update_book(
            db_session, sample_book.id, sample_user.id, {"title": "Nineteen Eighty-Four"}
        )

        assert book.title == "Nineteen Eighty-Four"
        assert book.author == "George Orwell"

    def test_genre_update_stores_value(
        self, db_session: Session, sample_book: Book, sample_user: User
    ):
        book = catalog.update_book(
            db_session, sample_book.id, sample_user.id, {"genre": "Science Fiction"}
        )

        assert book.genre == Genre.SCIENCE_FICTION.value

    @pytest.mark.parametrize("field", ["average_rating", "review_count", "owner_id"])
    def test_derived_and_unknown_fields_rejected(
        self, db_session: Session, sample_book: Book, sample_user: User, field: str
    ):
        with pytest.raises(ValidationError) as exc_info:
            catalog.update_book(db_session, sample_book.id, sample_user.id, {field: 5})

        assert exc_info.value.errors[0]["field"] == field
        book = db_session.get(Book, sample_book.id)
        assert book.average_rating == Decimal("0")
        assert book.review_count == 0

    def test_not_owner(self, db_session: Session, sample_book: Book, second_user: User):
        with pytest.raises(AuthorizationError):
            catalog.update_book(
                db_session, sample_book.id, second_user.id, {"title": "Stolen"}
            )

        assert db_session.get(Book, sample_book.id).title == "1984"

    def test_not_found(self, db_session: Session, sample_user: User):
        with pytest.raises(NotFoundError):
            catalog.update_book(db_session, 99999, sample_user.id, {"title": "Nothing"})


class TestDeleteBook:
    """Tests for catalog.delete_book()"""

    def test_delete_removes_all_reviews(
        self, db_session: Session, sample_book: Book, sample_user: User, make_user
    ):
        for i in range(3):
            reader = make_user(f"Reader {i}", f"reader{i}@example.com")
            reviews.create_review(
                db_session, sample_book.id, reader.id, i + 2, "Worth reading once."
            )

        catalog.delete_book(db_session, sample_book.id, sample_user.id)

        with pytest.raises(NotFoundError):
            catalog.get_book(db_session, sample_book.id)
        remaining = db_session.execute(
            select(func.count(Review.id)).where(Review.book_id == sample_book.id)
        ).scalar()
        assert remaining == 0

    @pytest.mark.filterwarnings("error::sqlalchemy.exc.SAWarning")
    def test_delete_with_loaded_reviews_collection(
        self, db_session: Session, sample_review: Review, sample_user: User
    ):
        book = catalog.get_book(db_session, sample_review.book_id)
        assert len(book.reviews) == 1

        catalog.delete_book(db_session, book.id, sample_user.id)

        assert db_session.get(Book, sample_review.book_id) is None
        assert db_session.execute(select(func.count(Review.id))).scalar() == 0

    def test_not_owner(
        self, db_session: Session, sample_review: Review, second_user: User
    ):
        with pytest.raises(AuthorizationError):
            catalog.delete_book(db_session, sample_review.book_id, second_user.id)

        assert catalog.get_book(db_session, sample_review.book_id).review_count == 1

    def test_failure_keeps_book_and_reviews(
        self,
        db_session: Session,
        sample_review: Review,
        sample_user: User,
        monkeypatch,
    ):
        """Reviews removed before a failing book delete are restored by the rollback."""
        book_id = sample_review.book_id
        original_delete = db_session.delete

        def failing_delete(instance):
            if isinstance(instance, Book):
                raise SQLAlchemyError("disk full")
            original_delete(instance)

        monkeypatch.setattr(db_session, "delete", failing_delete)

        with pytest.raises(SQLAlchemyError):
            catalog.delete_book(db_session, book_id, sample_user.id)

        monkeypatch.undo()
        assert catalog.get_book(db_session, book_id).review_count == 1
        remaining = db_session.execute(
            select(func.count(Review.id)).where(Review.book_id == book_id)
        ).scalar()
        assert remaining == 1


class TestListBooks:
    """Tests for catalog.list_books()"""

    def test_defaults_newest_first(self, db_session: Session, multiple_books: list[Book]):
        items, total = catalog.list_books(db_session)

        assert total == 12
        assert [b.title for b in items] == [f"Test Book {n}" for n in range(12, 7, -1)]

    def test_second_page(self, db_session: Session, multiple_books: list[Book]):
        newest_first = [b.id for b in reversed(multiple_books)]

        items, total = catalog.list_books(db_session, page=2, page_size=5)

        assert total == 12
        assert [b.id for b in items] == newest_first[5:10]

    def test_last_partial_page(self, db_session: Session, multiple_books: list[Book]):
        items, _ = catalog.list_books(db_session, page=3, page_size=5)

        assert len(items) == 2

    def test_page_past_end_is_empty(self, db_session: Session, multiple_books: list[Book]):
        items, total = catalog.list_books(db_session, page=10, page_size=5)

        assert items == []
        assert total == 12

    def test_search_title_case_insensitive(
        self, db_session: Session, multiple_books: list[Book]
    ):
        items, total = catalog.list_books(db_session, q="test book 1")

        # 1, 10, 11, 12
        assert total == 4
        assert all("Test Book 1" in b.title for b in items)

    def test_search_author(self, db_session: Session, multiple_books: list[Book]):
        _, total = catalog.list_books(db_session, q="ANN")

        assert total == 4

    def test_genre_filter(self, db_session: Session, multiple_books: list[Book]):
        items, total = catalog.list_books(db_session, genre=Genre.MYSTERY, page_size=20)

        assert total == 4
        assert {b.genre for b in items} == {"Mystery"}

    def test_unknown_genre(self, db_session: Session, multiple_books: list[Book]):
        with pytest.raises(ValidationError):
            catalog.list_books(db_session, genre="Poetry")

    @pytest.mark.parametrize("genre", ["", "All", None])
    def test_empty_or_all_genre_is_no_filter(
        self, db_session: Session, multiple_books: list[Book], genre
    ):
        _, total = catalog.list_books(db_session, genre=genre)

        assert total == 12

    @pytest.mark.parametrize("q", ["", "   "])
    def test_blank_search_is_no_filter(
        self, db_session: Session, multiple_books: list[Book], q
    ):
        _, total = catalog.list_books(db_session, q=q)

        assert total == 12

    def test_search_wildcards_are_literal(
        self, db_session: Session, multiple_books: list[Book], sample_user: User
    ):
        fields = {**BOOK_FIELDS, "title": "100% Kitchen_Sink"}
        book = catalog.create_book(db_session, owner_id=sample_user.id, **fields)

        assert catalog.list_books(db_session, q="%")[1] == 1
        assert catalog.list_books(db_session, q="_")[1] == 1
        items, total = catalog.list_books(db_session, q="0% kitchen_s")
        assert total == 1
        assert items[0].id == book.id
        assert catalog.list_books(db_session, q="1_0")[1] == 0

    def test_sort_by_year(self, db_session: Session, multiple_books: list[Book]):
        items, _ = catalog.list_books(db_session, sort_by=BookSort.YEAR, page_size=3)

        assert [b.published_year for b in items] == [2001, 2000, 1999]

    def test_sort_by_rating(
        self,
        db_session: Session,
        multiple_books: list[Book],
        second_user: User,
    ):
        low, high = multiple_books[0], multiple_books[1]
        reviews.create_review(db_session, low.id, second_user.id, 2, "Not really for me.")
        reviews.create_review(db_session, high.id, second_user.id, 5, "Loved every page.")

        items, _ = catalog.list_books(db_session, sort_by="rating", page_size=3)

        assert items[0].id == high.id
        assert items[1].id == low.id

    def test_invalid_sort(self, db_session: Session):
        with pytest.raises(ValidationError):
            catalog.list_books(db_session, sort_by="title")

    @pytest.mark.parametrize("page,page_size", [(0, 5), (1, 0), (1, 1000)])
    def test_invalid_paging(self, db_session: Session, page: int, page_size: int):
        with pytest.raises(ValidationError):
            catalog.list_books(db_session, page=page, page_size=page_size)
