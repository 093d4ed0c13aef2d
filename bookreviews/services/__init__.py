"""
Services Package

Business logic, kept separate from HTTP handling so it can be called from
routers, scripts and tests alike. Services raise the domain exceptions of
bookreviews.exceptions and never HTTPException.

Current services:
- catalog.py: Book create/read/update/delete and the catalog listing
- reviews.py: The review ledger (one review per user per book)
- ratings.py: Cached rating summary aggregation and reconciliation
- permissions.py: Ownership guard shared by all mutations
- security.py: Password hashing and JWT utilities
- rate_limiter.py: Rate limiting with slowapi
"""
