"""
SQLAlchemy Models Package

Model Relationships:
- User -> Book: One-to-Many (a user owns the books they added)
- User -> Review: One-to-Many (a user authors many reviews)
- Book -> Review: One-to-Many (at most one review per user per book)

Import all models here to:
1. Make them available as: from bookreviews.models import Book, Review, User
2. Ensure Alembic discovers them for migrations
"""

from bookreviews.models.user import User
from bookreviews.models.book import Book, Genre
from bookreviews.models.review import Review

__all__ = [
    "User",
    "Book",
    "Genre",
    "Review",
]
