"""
Catalog Service

Books: create, read, update, delete and the filtered/sorted listing.

Business Rules:
- Only the user who added a book can update or delete it
- average_rating and review_count start at 0 and are never written here;
  they belong to the ratings service
- Deleting a book deletes its reviews in the same transaction
"""

import logging
from decimal import Decimal
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from bookreviews.config import get_settings
from bookreviews.exceptions import NotFoundError, ValidationError
from bookreviews.models import Book, Genre
from bookreviews.schemas.book import BookCreate, BookSort, BookUpdate
from bookreviews.services.permissions import authorize
from bookreviews.services.reviews import delete_all_for_book
from bookreviews.utils.pagination import page_offset
from bookreviews.utils.validation import validate_input

logger = logging.getLogger(__name__)
settings = get_settings()

# Every order ends on id so pages are stable when the sort key ties
SORT_ORDERS = {
    BookSort.NEWEST: (Book.created_at.desc(), Book.id.desc()),
    BookSort.YEAR: (Book.published_year.desc(), Book.id.desc()),
    BookSort.RATING: (Book.average_rating.desc(), Book.id.desc()),
}

# Genre values that mean "no genre filter"
ALL_GENRES = (None, "", "All")


def _book_query():
    return select(Book).options(selectinload(Book.owner))


def _parse_choice(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as exc:
        choices = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            [{"field": field, "message": f"Must be one of: {choices}"}]
        ) from exc


def get_book(db: Session, book_id: int) -> Book:
    """
    Get a book by ID with its owner loaded.

    Raises:
        NotFoundError: If the book does not exist
    """
    book = db.execute(_book_query().where(Book.id == book_id)).scalar_one_or_none()
    if book is None:
        raise NotFoundError(f"Book with id {book_id} not found")
    return book


def create_book(
    db: Session,
    owner_id: int,
    title: str,
    author: str,
    description: str,
    genre: Genre | str,
    published_year: int,
) -> Book:
    """
    Add a book to the catalog.

    Args:
        db: Database session
        owner_id: Authenticated user adding the book
        title, author, description: Non-empty text
        genre: One of the Genre values
        published_year: 1000 to the current year

    Returns:
        The created book with its owner loaded

    Raises:
        ValidationError: If any field is missing or invalid
    """
    data = validate_input(
        BookCreate,
        title=title,
        author=author,
        description=description,
        genre=genre,
        published_year=published_year,
    )

    book = Book(
        title=data.title,
        author=data.author,
        description=data.description,
        genre=data.genre.value,
        published_year=data.published_year,
        owner_id=owner_id,
        average_rating=Decimal("0.0"),
        review_count=0,
    )
    db.add(book)
    db.commit()

    logger.info(f"Book {book.id} '{book.title}' added by user {owner_id}")
    return get_book(db, book.id)


def update_book(
    db: Session,
    book_id: int,
    requester_id: int,
    fields: dict[str, Any],
) -> Book:
    """
    Update descriptive fields of a book.

    Only the fields present in `fields` change. The cached rating fields,
    like any unknown key, are rejected.

    Raises:
        NotFoundError: If the book does not exist
        AuthorizationError: If the requester is not the owner
        ValidationError: If a field is invalid or not updatable
    """
    book = get_book(db, book_id)
    authorize(requester_id, book, "update")

    changes = validate_input(BookUpdate, **fields).model_dump(
        mode="json", exclude_unset=True, exclude_none=True
    )

    for field, value in changes.items():
        setattr(book, field, value)

    db.commit()

    logger.info(f"Book {book_id} updated by user {requester_id}: {sorted(changes)}")
    return get_book(db, book_id)


def delete_book(db: Session, book_id: int, requester_id: int) -> None:
    """
    Delete a book and all of its reviews.

    Both deletions are committed together; on any database error the
    session is rolled back and nothing is removed.

    Raises:
        NotFoundError: If the book does not exist
        AuthorizationError: If the requester is not the owner
    """
    book = get_book(db, book_id)
    authorize(requester_id, book, "delete")

    try:
        removed = delete_all_for_book(db, book_id)
        db.expire(book, ["reviews"])
        db.delete(book)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.error(f"Deleting book {book_id} failed; rolled back")
        raise

    logger.info(f"Book {book_id} deleted by user {requester_id} with {removed} reviews")


def list_books(
    db: Session,
    q: str | None = None,
    genre: Genre | str | None = None,
    sort_by: BookSort | str = BookSort.NEWEST,
    page: int = 1,
    page_size: int = 5,
) -> tuple[list[Book], int]:
    """
    List books with search, genre filter, sorting and pagination.

    Args:
        db: Database session
        q: Case-insensitive substring matched against title or author;
            blank means no search
        genre: Only books of this genre; None, "" or "All" match every genre
        sort_by: newest (default), year or rating, all descending
        page: 1-indexed page number
        page_size: Books per page

    Returns:
        (books on the requested page, total number of matching books)

    Raises:
        ValidationError: On an unknown genre/sort or out-of-range paging
    """
    sort_by = _parse_choice(BookSort, sort_by, "sort_by")
    if page < 1:
        raise ValidationError([{"field": "page", "message": "Must be at least 1"}])
    if not 1 <= page_size <= settings.max_page_size:
        raise ValidationError([{
            "field": "page_size",
            "message": f"Must be between 1 and {settings.max_page_size}",
        }])

    stmt = select(Book)

    q = q.strip() if q else None
    if q:
        stmt = stmt.where(
            or_(
                Book.title.icontains(q, autoescape=True),
                Book.author.icontains(q, autoescape=True),
            )
        )

    if genre not in ALL_GENRES:
        stmt = stmt.where(Book.genre == _parse_choice(Genre, genre, "genre").value)

    count_stmt = select(func.count()).select_from(stmt.subquery())
    total = db.execute(count_stmt).scalar() or 0

    page_stmt = (
        stmt.options(selectinload(Book.owner))
        .order_by(*SORT_ORDERS[sort_by])
        .offset(page_offset(page, page_size))
        .limit(page_size)
    )
    books = list(db.execute(page_stmt).scalars().all())

    return books, total
