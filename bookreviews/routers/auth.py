"""
Authentication Router

Handles user authentication endpoints:
- Registration (name, email, password)
- Login (email/password → JWT access token)
- Get current user (from JWT token)

Security:
=========
- Passwords are hashed with bcrypt before storage
- Plain text passwords are never logged or stored
- Access tokens expire after settings.access_token_expire_minutes
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError

from bookreviews.config import get_settings
from bookreviews.dependencies import ActiveUser, DbSession
from bookreviews.exceptions import AuthenticationError, ConflictError
from bookreviews.models import User
from bookreviews.schemas.user import TokenResponse, UserCreate, UserResponse
from bookreviews.services.rate_limiter import limiter
from bookreviews.services.security import (
    create_access_token,
    hash_password,
    verify_password,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/auth",
    tags=["Authentication"],
    responses={
        401: {"description": "Unauthorized"},
        409: {"description": "Email already registered"},
    },
)


@router.post(
    "/register",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
    description="""
    Create a new user account.

    **Password Requirements:**
    - 8-128 characters
    - At least 1 letter
    - At least 1 number
    """,
)
@limiter.limit("5/minute")
def register(
    request: Request,
    user_data: UserCreate,
    db: DbSession,
) -> UserResponse:
    """
    Register a new user with email and password.

    Raises:
        ConflictError: If the email is already registered
    """
    stmt = select(User).where(User.email == user_data.email)
    if db.execute(stmt).scalar_one_or_none() is not None:
        raise ConflictError("Email already registered")

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        is_active=True,
    )
    db.add(user)

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise ConflictError("Email already registered") from exc
    db.refresh(user)

    logger.info(f"New user registered: {user.email}")

    return UserResponse.model_validate(user)


@router.post(
    "/login",
    response_model=TokenResponse,
    summary="Login with email and password",
    description="""
    Authenticate with email and password to receive a JWT access token.

    Include the token in the Authorization header:
    ```
    Authorization: Bearer <access_token>
    ```

    **Note:** Use the email address in the 'username' field (OAuth2 standard).
    """,
)
@limiter.limit("10/minute")
def login(
    request: Request,
    db: DbSession,
    form_data: OAuth2PasswordRequestForm = Depends(),
) -> TokenResponse:
    """
    Authenticate a user and return an access token.

    Raises:
        AuthenticationError: On unknown email, wrong password or an
            inactive account
    """
    email = form_data.username.strip().lower()

    stmt = select(User).where(User.email == email)
    user = db.execute(stmt).scalar_one_or_none()

    if user is None or not verify_password(form_data.password, user.hashed_password):
        logger.warning(f"Login failed for {email}")
        raise AuthenticationError("Incorrect email or password")

    if not user.is_active:
        logger.warning(f"Login failed: inactive account {email}")
        raise AuthenticationError("Account is inactive")

    access_token = create_access_token({"sub": str(user.id)})

    logger.info(f"User logged in: {user.email}")

    return TokenResponse(
        access_token=access_token,
        token_type="bearer",
        expires_in=settings.access_token_expire_minutes * 60,
    )


@router.get(
    "/me",
    response_model=UserResponse,
    summary="Get current user",
    description="Return the account of the authenticated user.",
)
@limiter.limit(settings.rate_limit_default)
def get_me(
    request: Request,
    current_user: ActiveUser,
) -> UserResponse:
    """Return the authenticated user's account."""
    return UserResponse.model_validate(current_user)
