"""
Password hashing and signed session cookies.

The cookie only carries a signed reference to a server-side session; the
session row is the source of truth for expiry and logout.
"""

from datetime import datetime
from typing import Optional
import logging

import bcrypt
from jose import jwt
from jose.exceptions import JWTError

from app.core.config import Settings

logger = logging.getLogger(__name__)

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

def verify_password(password: str, hash_: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), hash_.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Stored password is not a valid bcrypt hash")
        return False

def encode_session_cookie(session_id: str, expires_at: datetime, settings: Settings) -> str:
    """Sign a session id into a cookie value."""
    payload = {"sid": session_id, "exp": int(expires_at.timestamp())}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)

def decode_session_cookie(value: str, settings: Settings) -> Optional[str]:
    """Return the session id from a cookie value, or None if tampered or expired."""
    try:
        payload = jwt.decode(value, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected session cookie: {e}")
        return None
    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) else None
