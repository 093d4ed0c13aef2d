"""
Books Router

Catalog endpoints:
- GET /books/ - Search, filter, sort and paginate the catalog
- GET /books/genres - The fixed genre list
- GET /books/{book_id} - Get a book
- POST /books/ - Add a book (authenticated)
- PUT /books/{book_id} - Update a book (owner only)
- DELETE /books/{book_id} - Delete a book and its reviews (owner only)

The handlers only translate HTTP to calls into bookreviews.services.catalog.
"""

import logging

from fastapi import APIRouter, Request, status

from bookreviews.config import get_settings
from bookreviews.dependencies import ActiveUser, BookFilters, DbSession, Pagination
from bookreviews.models import Genre
from bookreviews.schemas import (
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
)
from bookreviews.services import catalog
from bookreviews.services.rate_limiter import limiter
from bookreviews.utils.pagination import total_pages

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


@router.get(
    "/",
    response_model=BookListResponse,
    summary="List books",
    description="""
    Get a paginated list of books.

    - `q`: case-insensitive match on title or author
    - `genre`: only books of this genre
    - `sort_by`: `newest` (default), `year` or `rating`
    """,
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    filters: BookFilters,
) -> BookListResponse:
    """List books matching the filters, one page at a time."""
    books, total = catalog.list_books(
        db,
        q=filters.q,
        genre=filters.genre,
        sort_by=filters.sort_by,
        page=pagination.page,
        page_size=pagination.page_size,
    )

    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in books],
        page=pagination.page,
        page_size=pagination.page_size,
        total=total,
        total_pages=total_pages(total, pagination.page_size),
    )


# Declared before /{book_id} so "genres" is not parsed as an ID
@router.get(
    "/genres",
    response_model=list[str],
    summary="List genres",
    description="The genres a book can be filed under.",
)
@limiter.limit(settings.rate_limit_default)
def list_genres(request: Request) -> list[str]:
    """Return every Genre value."""
    return [genre.value for genre in Genre]


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book",
    description="Retrieve a book with its owner and cached rating summary.",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookResponse:
    """Get a single book by ID."""
    return BookResponse.model_validate(catalog.get_book(db, book_id))


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a book",
    description="Add a book to the catalog. Requires authentication.",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> BookResponse:
    """Add a book owned by the authenticated user."""
    book = catalog.create_book(
        db,
        owner_id=current_user.id,
        title=book_data.title,
        author=book_data.author,
        description=book_data.description,
        genre=book_data.genre,
        published_year=book_data.published_year,
    )
    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="""
    Update a book. Only fields in the request body change.

    Only the user who added the book may update it. average_rating and
    review_count are maintained by the API and cannot be set.
    """,
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> BookResponse:
    """Update the given fields of a book."""
    book = catalog.update_book(
        db,
        book_id,
        requester_id=current_user.id,
        fields=book_data.model_dump(exclude_unset=True),
    )
    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Delete a book and all of its reviews. Owner only.",
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Delete a book together with its reviews."""
    catalog.delete_book(db, book_id, requester_id=current_user.id)
