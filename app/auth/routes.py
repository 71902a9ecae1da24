# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Account registration, login and the current user's profile.
# =============================================================================

import logging

from fastapi import APIRouter, Depends, status

from app.auth.dependencies import get_current_user
from app.auth.models import AuthResponse, AuthUser, LoginRequest, RegisterRequest
from app.auth.tokens import create_access_token, token_lifetime_seconds
from app.config import settings
from core.models.email import SendVerificationRequest
from core.models.user import UserResponse
from core.security import generate_token
from core.services.email_queue_service import EmailQueueService
from core.services.user_service import UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Auth"])


def _auth_response(user: dict) -> AuthResponse:
    return AuthResponse(
        access_token=create_access_token(user),
        expires_in=token_lifetime_seconds(),
        user=UserResponse(**user),
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(request: RegisterRequest) -> AuthResponse:
    """
    Create an account and return an access token.

    A verification email is queued; if the queue is down the account is
    still created.

    The verification link is a placeholder. Its token is random and not
    stored anywhere, and no endpoint redeems it, so following it verifies
    nothing. Accounts are usable straight away.

    Raises:
        409: If the email is already registered
    """
    user = UserService.create(
        email=request.email,
        password=request.password,
        first_name=request.first_name,
        last_name=request.last_name,
        phone=request.phone,
    )

    try:
        EmailQueueService.queue_verification_email(SendVerificationRequest(
            to=user["email"],
            user_name=user["first_name"],
            verification_link=f"{settings.APP_URL.rstrip('/')}/verify-email?token={generate_token()}",
        ))
    except Exception as e:
        logger.error(f"Could not queue verification email for user {user['id']}: {e}")

    return _auth_response(user)


@router.post("/login", response_model=AuthResponse)
def login(request: LoginRequest) -> AuthResponse:
    """
    Exchange email and password for an access token.

    Raises:
        401: INVALID_CREDENTIALS for unknown email, wrong password or an
            inactive account
    """
    user = UserService.authenticate(request.email, request.password)
    logger.info(f"User logged in: {user['id']}")
    return _auth_response(user)


@router.get("/me", response_model=UserResponse)
def get_current_user_info(
    user: AuthUser = Depends(get_current_user)
) -> UserResponse:
    """
    Get the current authenticated user's profile.

    Raises:
        401: If not authenticated
        404: If the account was deleted after the token was issued
    """
    return UserResponse(**UserService.get_user(user.id))
