"""UserSession model for server-held login sessions."""

import hashlib
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UUID

from .base import BaseModel


class UserSession(BaseModel):
    """
    Server-side binding of an opaque session key to an account identity.

    Only the SHA-256 of the key is persisted, so a leaked table does not
    yield usable cookies. The row copies the account's username and role,
    never its password digest or lockout counters.
    """

    __tablename__ = "user_sessions"

    session_key_hash = Column(
        String(64),
        nullable=False,
        unique=True,
        comment="SHA-256 hex digest of the session key"
    )

    account_id = Column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        comment="Account bound to this session"
    )

    username = Column(
        String(20),
        nullable=False,
        comment="Username at login time"
    )

    role = Column(
        String(20),
        nullable=False,
        comment="Role at login time"
    )

    origin_address = Column(
        String(64),
        nullable=True,
        comment="Address the session was created from"
    )

    expires_at = Column(
        DateTime(timezone=True),
        nullable=False,
        comment="Session expiration timestamp"
    )

    __table_args__ = (
        Index("idx_user_sessions_account", "account_id"),
    )

    @staticmethod
    def hash_key(session_key: str) -> str:
        """Hash a session key for storage and lookup."""
        return hashlib.sha256(session_key.encode("utf-8")).hexdigest()

    def is_expired(self, now: datetime = None) -> bool:
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return now >= expires_at
