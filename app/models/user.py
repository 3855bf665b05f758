"""
User accounts and their server-side login sessions.
"""

from sqlalchemy import Column, String, DateTime, ForeignKey
from app.core.database import Base

class UserRow(Base):
    """Dashboard operator account."""

    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    email = Column(String, unique=True, index=True, nullable=False)
    password = Column(String, nullable=False)  # bcrypt hash
    name = Column(String, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<UserRow(id={self.id}, email={self.email})>"

class SessionRow(Base):
    """Server-side login session keyed by an opaque token."""

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True)
    user_id = Column(String(32), ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False)
    expires_at = Column(DateTime(timezone=True), index=True, nullable=False)

    def __repr__(self):
        return f"<SessionRow(user_id={self.user_id}, expires_at={self.expires_at})>"
