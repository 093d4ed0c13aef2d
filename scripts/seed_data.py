#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with sample users, books and reviews for
development.

USAGE:
    # Make sure you're in the project root with venv activated
    python scripts/seed_data.py

    # Keep existing rows
    python scripts/seed_data.py --keep

Books and reviews are created through the services, so every seeded book
ends up with a correct average_rating and review_count.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from bookreviews.database import SessionLocal, create_tables
from bookreviews.models import Book, Genre, Review, User
from bookreviews.services import catalog, reviews
from bookreviews.services.security import hash_password

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

SEED_PASSWORD = "Password123"


def clear_data(db: Session) -> None:
    """Delete all reviews, books and users."""
    logger.info("Clearing existing data...")
    db.execute(delete(Review))
    db.execute(delete(Book))
    db.execute(delete(User))
    db.commit()


def create_users(db: Session) -> dict[str, User]:
    """Create sample users, all with SEED_PASSWORD."""
    users_data = [
        ("Alice Reader", "alice@example.com"),
        ("Bob Bookworm", "bob@example.com"),
        ("Carol Critic", "carol@example.com"),
    ]

    users = {}
    for name, email in users_data:
        user = User(name=name, email=email, hashed_password=hash_password(SEED_PASSWORD))
        db.add(user)
        users[email] = user

    db.commit()
    logger.info(f"Created {len(users)} users (password: {SEED_PASSWORD})")
    return users


def create_books(db: Session, users: dict[str, User]) -> list[Book]:
    """Create sample books owned by the sample users."""
    books_data = [
        {
            "owner": "alice@example.com",
            "title": "1984",
            "author": "George Orwell",
            "description": "A dystopian novel about totalitarianism and surveillance.",
            "genre": Genre.FICTION,
            "published_year": 1949,
        },
        {
            "owner": "alice@example.com",
            "title": "Pride and Prejudice",
            "author": "Jane Austen",
            "description": "A romantic novel of manners set in Regency England.",
            "genre": Genre.ROMANCE,
            "published_year": 1813,
        },
        {
            "owner": "bob@example.com",
            "title": "Dune",
            "author": "Frank Herbert",
            "description": "Politics, religion and ecology on the desert planet Arrakis.",
            "genre": Genre.SCIENCE_FICTION,
            "published_year": 1965,
        },
        {
            "owner": "bob@example.com",
            "title": "Murder on the Orient Express",
            "author": "Agatha Christie",
            "description": "Hercule Poirot investigates a murder aboard a snowbound train.",
            "genre": Genre.MYSTERY,
            "published_year": 1934,
        },
        {
            "owner": "carol@example.com",
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "description": "Bilbo Baggins is swept into a quest for a dragon's treasure.",
            "genre": Genre.FANTASY,
            "published_year": 1937,
        },
        {
            "owner": "carol@example.com",
            "title": "Sapiens",
            "author": "Yuval Noah Harari",
            "description": "A brief history of humankind from the Stone Age onwards.",
            "genre": Genre.HISTORY,
            "published_year": 2011,
        },
    ]

    books = []
    for data in books_data:
        owner = users[data.pop("owner")]
        books.append(catalog.create_book(db, owner_id=owner.id, **data))

    logger.info(f"Created {len(books)} books")
    return books


def create_reviews(db: Session, users: dict[str, User], books: list[Book]) -> int:
    """Each user reviews every book they do not own."""
    texts = {
        1: "Could not get into it at all, sadly.",
        2: "Some good moments but mostly a slog.",
        3: "Solid read, though it dragged in places.",
        4: "Really enjoyed this one, would recommend.",
        5: "An absolute masterpiece. Read it twice.",
    }

    count = 0
    for i, book in enumerate(books):
        for j, user in enumerate(users.values()):
            if user.id == book.owner_id:
                continue
            rating = (i + j) % 5 + 1
            reviews.create_review(
                db,
                book.id,
                author_id=user.id,
                rating=rating,
                review_text=texts[rating],
            )
            count += 1

    logger.info(f"Created {count} reviews")
    return count


def seed_database(clear_existing: bool = True) -> None:
    """
    Seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
    """
    logger.info("Starting database seed...")

    create_tables()
    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        users = create_users(db)
        books = create_books(db, users)
        review_count = create_reviews(db, users, books)
    except Exception:
        db.rollback()
        logger.exception("Error seeding database")
        raise
    finally:
        db.close()

    logger.info(
        f"Seed complete: {len(users)} users, {len(books)} books, {review_count} reviews"
    )


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Seed the database with sample data")
    parser.add_argument(
        "--keep",
        action="store_true",
        help="Keep existing data instead of clearing it first",
    )
    args = parser.parse_args()

    seed_database(clear_existing=not args.keep)


if __name__ == "__main__":
    main()
