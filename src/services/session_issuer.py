"""Server-side session issuing and lookup."""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from src.models.account import Account, Role
from src.models.user_session import UserSession
from src.services.audit_logger import AuditAction, AuditLogger
from src.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SessionContext:
    """Authenticated request context handed to every protected operation."""

    key: str
    account_id: uuid.UUID
    username: str
    role: Role

    def public_view(self) -> Dict[str, Any]:
        """Identity fields safe to return to the client."""
        return {
            "id": str(self.account_id),
            "username": self.username,
            "role": self.role.value,
        }


class SessionIssuer:
    """Creates, resolves and destroys store-backed sessions."""

    def __init__(
        self,
        store: CredentialStore,
        audit: AuditLogger,
        ttl: timedelta = timedelta(hours=24),
    ):
        self.store = store
        self.audit = audit
        self.ttl = ttl

    async def issue(self, account: Account, origin_address: Optional[str] = None) -> SessionContext:
        """Bind a fresh opaque key to the account's id, username and role."""
        session_key = secrets.token_urlsafe(32)
        expires_at = datetime.now(timezone.utc) + self.ttl

        await self.store.create_session(
            UserSession.hash_key(session_key),
            account,
            origin_address,
            expires_at,
        )
        logger.info(f"Session issued for account {account.id}")

        return SessionContext(
            key=session_key,
            account_id=account.id,
            username=account.username,
            role=account.account_role,
        )

    async def current_session(self, session_key: Optional[str]) -> Optional[SessionContext]:
        """Resolve a session key without mutating anything."""
        if not session_key:
            return None

        user_session = await self.store.get_session(UserSession.hash_key(session_key))
        if user_session is None or user_session.is_expired():
            return None

        return SessionContext(
            key=session_key,
            account_id=user_session.account_id,
            username=user_session.username,
            role=Role(user_session.role),
        )

    async def destroy(self, session: SessionContext, origin_address: Optional[str] = None) -> None:
        """Log the logout against the session's account, then drop the binding."""
        await self.audit.record(session.account_id, AuditAction.USER_LOGOUT, origin_address)
        await self.store.delete_session(UserSession.hash_key(session.key))
        logger.info(f"Session destroyed for account {session.account_id}")
