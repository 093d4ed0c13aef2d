"""
Book Reviews Application Package

A book cataloguing and review API: users register, list books and post
one review per book, and every book keeps a cached average rating that is
re-derived from its reviews whenever they change.

Package Structure:
- config.py: Application configuration using Pydantic Settings
- database.py: SQLAlchemy engine, session factory and declarative base
- exceptions.py: Domain errors raised by the services
- main.py: FastAPI application factory and exception handlers
- dependencies.py: Dependency injection functions (session, auth, pagination)
- models/: SQLAlchemy ORM models (User, Book, Review)
- schemas/: Pydantic request/response schemas
- services/: Catalog, review ledger, rating aggregation, permissions
- routers/: API route handlers
- utils/: Validation and pagination helpers
"""

__version__ = "0.1.0"
