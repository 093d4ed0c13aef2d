"""
Book Model

The catalog entry for a title, owned by the user who added it.

Besides the descriptive fields, a book stores a cached rating summary:
- average_rating: mean of its review ratings, one decimal place
- review_count: number of reviews

Both are derived data. They are written only by the rating aggregator
(bookreviews.services.ratings) after every review change, never by clients and
never computed on the fly by readers.
"""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookreviews.database import Base

if TYPE_CHECKING:
    from bookreviews.models.review import Review
    from bookreviews.models.user import User


class Genre(str, Enum):
    """
    The fixed set of genres a book can belong to.

    Stored as its string value, so the values double as the API contract.
    """
    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    MYSTERY = "Mystery"
    THRILLER = "Thriller"
    ROMANCE = "Romance"
    SCIENCE_FICTION = "Science Fiction"
    FANTASY = "Fantasy"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    OTHER = "Other"


class Book(Base):
    """
    Book model representing catalog entries.

    Table: books

    Relationships:
    - owner: Many-to-One, the user who added the book
    - reviews: One-to-Many, reviews of this book

    Indexes:
    - title, author: searched by the catalog listing
    - genre: filtered by the catalog listing
    - published_year, average_rating, created_at: sort keys

    Example:
        book = Book(
            title="1984",
            author="George Orwell",
            description="A dystopian novel...",
            genre=Genre.FICTION.value,
            published_year=1949,
            owner_id=user.id,
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
        comment="Author name as written on the cover"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Book description or summary"
    )

    genre: Mapped[str] = mapped_column(
        String(50),
        index=True,
        nullable=False,
        default=Genre.OTHER.value,
        comment="One of the Genre enum values"
    )

    published_year: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
        comment="Year of first publication"
    )

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
        comment="User who added the book"
    )

    # -------------------------------------------------------------------------
    # Cached Rating Summary
    # -------------------------------------------------------------------------
    # Numeric(2, 1) holds 0.0 - 5.0 exactly, one decimal place.
    average_rating: Mapped[Decimal] = mapped_column(
        Numeric(2, 1),
        index=True,
        nullable=False,
        default=Decimal("0"),
        comment="Average review rating (0.0-5.0), 0 if no reviews"
    )

    review_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
        comment="Number of reviews for this book"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        index=True,
        default=lambda: datetime.now(UTC),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        onupdate=lambda: datetime.now(UTC),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="books",
    )

    # Reviews are removed explicitly by the review ledger before the book
    # row is deleted; passive_deletes stops the ORM from loading them first.
    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="ck_book_average_rating_range",
        ),
        CheckConstraint("review_count >= 0", name="ck_book_review_count_positive"),
    )

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', author='{self.author}')"
