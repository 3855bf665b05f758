"""
Session authentication endpoints.
"""

from fastapi import APIRouter, Depends, Response, status
from datetime import timedelta
import logging

from app.api.deps import get_current_session, get_current_user, get_settings, get_storage
from app.api.v1.schemas import LoginRequest, MessageResponse, PublicUser, SignupRequest, UserEnvelope
from app.core.config import Settings
from app.core.errors import AuthenticationError, ValidationError
from app.core.security import encode_session_cookie, hash_password, verify_password
from app.storage.base import BaseStorage
from app.storage.records import Session, User

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/login", response_model=UserEnvelope)
async def login(
    credentials: LoginRequest,
    response: Response,
    storage: BaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """Check credentials and open a server-side session."""

    user = await storage.get_user_by_email(credentials.email)
    if not user or not verify_password(credentials.password, user.password):
        logger.warning(f"Failed login attempt for {credentials.email}")
        raise AuthenticationError("Invalid credentials")

    ttl = timedelta(hours=settings.SESSION_TTL_HOURS)
    session = await storage.create_session(user.id, ttl)
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=encode_session_cookie(session.id, session.expires_at, settings),
        max_age=int(ttl.total_seconds()),
        httponly=True,
        secure=settings.SESSION_COOKIE_SECURE,
        samesite="lax",
    )

    logger.info(f"User logged in: {user.id}")

    return UserEnvelope(user=PublicUser.model_validate(user))

@router.post("/signup", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
async def signup(
    account: SignupRequest,
    storage: BaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """Create a dashboard account."""

    if len(account.password) < settings.MIN_PASSWORD_LENGTH:
        raise ValidationError.for_field(
            "password", f"Password must be at least {settings.MIN_PASSWORD_LENGTH} characters"
        )

    user = await storage.create_user({
        "email": account.email,
        "password": hash_password(account.password),
        "name": account.name,
    })

    return UserEnvelope(user=PublicUser.model_validate(user))

@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    session: Session = Depends(get_current_session),
    storage: BaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings)
):
    """Destroy the current session."""

    await storage.delete_session(session.id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)

    logger.info(f"User logged out: {session.user_id}")

    return MessageResponse(message="Logged out successfully")

@router.get("/me", response_model=UserEnvelope)
async def me(current_user: User = Depends(get_current_user)):
    """Return the logged-in user."""
    return UserEnvelope(user=PublicUser.model_validate(current_user))
