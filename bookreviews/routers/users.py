"""
Users Router

Public user endpoints:
- GET /users/{user_id} - Public user profile

A user's reviews are served by the reviews router
(GET /users/{user_id}/reviews).
"""

from fastapi import APIRouter, Request

from bookreviews.config import get_settings
from bookreviews.dependencies import DbSession, get_user_or_404
from bookreviews.exceptions import NotFoundError
from bookreviews.schemas.user import UserSummary
from bookreviews.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        404: {"description": "User not found"},
    },
)


@router.get(
    "/{user_id}",
    response_model=UserSummary,
    summary="Get public user profile",
    description="The same user reference embedded in books and reviews.",
)
@limiter.limit(settings.rate_limit_default)
def get_user_profile(
    request: Request,
    user_id: int,
    db: DbSession,
) -> UserSummary:
    """Get a user's public profile. Inactive accounts are hidden."""
    user = get_user_or_404(db, user_id)

    if not user.is_active:
        raise NotFoundError(f"User with id {user_id} not found")

    return UserSummary.model_validate(user)
