"""
API Routers Package

Router Structure:
- auth.py: /api/v1/auth/* endpoints (registration, login, current user)
- books.py: /api/v1/books/* catalog endpoints
- reviews.py: review endpoints under /books/{id}, /reviews and /users/{id}
- users.py: /api/v1/users/{id} public profile

Each router is imported and registered in main.py.
"""

from bookreviews.routers.auth import router as auth_router
from bookreviews.routers.books import router as books_router
from bookreviews.routers.reviews import router as reviews_router
from bookreviews.routers.users import router as users_router

__all__ = [
    "auth_router",
    "books_router",
    "reviews_router",
    "users_router",
]
