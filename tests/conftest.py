"""
pytest Fixtures for Book Reviews API Tests

Shared fixtures used across all test files.

FIXTURE SCOPES:
- Every fixture here is function scoped: each test gets a brand new
  in-memory database, so services are free to commit and roll back.

Books and reviews are created through the services, so sample books always
carry a correct rating summary.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"

from collections.abc import Callable, Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookreviews.database import Base, get_db
from bookreviews.main import app
from bookreviews.models import Book, Genre, Review, User
from bookreviews.services import catalog, reviews
from bookreviews.services.security import hash_password

TEST_PASSWORD = "SecurePass123"


# =============================================================================
# DATABASE FIXTURES
# =============================================================================
@pytest.fixture
def engine():
    """
    SQLite in-memory engine with all tables.

    StaticPool keeps the single connection alive; without it the
    in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db_session(engine) -> Generator[Session, None, None]:
    """Session configured like the application's SessionLocal."""
    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=engine,
    )
    session = TestSessionLocal()

    yield session

    session.close()


@pytest.fixture
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Test client wired to the test session.

    get_db is overridden so requests and the test share one session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================
@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory for additional users."""

    def _make_user(name: str, email: str, is_active: bool = True) -> User:
        user = User(
            name=name,
            email=email,
            hashed_password=hash_password(TEST_PASSWORD),
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture
def sample_user(make_user) -> User:
    """Owner of the sample books."""
    return make_user("Test User", "testuser@example.com")


@pytest.fixture
def second_user(make_user) -> User:
    """A second user for ownership scenarios."""
    return make_user("Second User", "seconduser@example.com")


@pytest.fixture
def sample_book(db_session: Session, sample_user: User) -> Book:
    """A book owned by sample_user, with no reviews."""
    return catalog.create_book(
        db_session,
        owner_id=sample_user.id,
        title="1984",
        author="George Orwell",
        description="A dystopian novel set in a totalitarian society.",
        genre=Genre.FICTION,
        published_year=1949,
    )


@pytest.fixture
def sample_review(
    db_session: Session,
    sample_book: Book,
    second_user: User,
) -> Review:
    """A 4-star review of sample_book written by second_user."""
    return reviews.create_review(
        db_session,
        sample_book.id,
        author_id=second_user.id,
        rating=4,
        review_text="Chilling and still relevant today.",
    )


@pytest.fixture
def multiple_books(db_session: Session, sample_user: User) -> list[Book]:
    """
    Twelve books owned by sample_user, in creation order.

    Genres alternate Fiction / Mystery / Fantasy; years run 1990-2001.
    Titles 1-4 are written by "Ann Author", the rest by "Other Writer".
    """
    genres = [Genre.FICTION, Genre.MYSTERY, Genre.FANTASY]
    books = []
    for i in range(12):
        books.append(
            catalog.create_book(
                db_session,
                owner_id=sample_user.id,
                title=f"Test Book {i + 1}",
                author="Ann Author" if i < 4 else "Other Writer",
                description=f"Description for book {i + 1}",
                genre=genres[i % 3],
                published_year=1990 + i,
            )
        )
    return books
