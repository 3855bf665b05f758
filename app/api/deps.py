"""
Shared FastAPI dependencies: injected storage, settings and the session gate.
"""

from fastapi import Depends, Request
import logging

from app.core.config import Settings
from app.core.errors import AuthenticationError
from app.core.security import decode_session_cookie
from app.services.telemetry import TelemetrySource
from app.storage.base import BaseStorage
from app.storage.records import Session, User

logger = logging.getLogger(__name__)

def get_storage(request: Request) -> BaseStorage:
    """Dependency to get the storage backend from app state."""
    return request.app.state.storage

def get_settings(request: Request) -> Settings:
    return request.app.state.settings

def get_telemetry(request: Request) -> TelemetrySource:
    return request.app.state.telemetry

async def get_current_session(
    request: Request,
    storage: BaseStorage = Depends(get_storage),
    settings: Settings = Depends(get_settings),
) -> Session:
    """Resolve the session cookie to a live server-side session."""
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not cookie:
        raise AuthenticationError("Authentication required")

    session_id = decode_session_cookie(cookie, settings)
    if session_id is None:
        raise AuthenticationError("Invalid session")

    session = await storage.get_session(session_id)
    if session is None:
        raise AuthenticationError("Session expired")
    return session

async def get_current_user(
    session: Session = Depends(get_current_session),
    storage: BaseStorage = Depends(get_storage),
) -> User:
    user = await storage.get_user(session.user_id)
    if user is None:
        logger.warning(f"Session {session.id[:8]}... refers to a missing user")
        raise AuthenticationError("Not authenticated")
    return user
