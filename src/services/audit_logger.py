"""Best-effort audit trail of security-relevant actions."""

import logging
import uuid
from typing import Any, List, Optional

from src.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


class AuditAction:
    """Action descriptions written to the audit log."""

    USER_REGISTERED = "User Registered"
    USER_LOGIN = "User Login"
    USER_LOGOUT = "User Logout"
    LOGIN_REJECTED_LOCKED = "Login Rejected: Account Locked"
    FAILED_LOGIN_UNKNOWN_USER = "Failed Login Attempt (unknown username)"

    @staticmethod
    def failed_login(attempts: int) -> str:
        return f"Failed Login Attempt ({attempts})"

    @staticmethod
    def uploaded_track(title: str) -> str:
        return f"Uploaded Music: {title}"

    @staticmethod
    def downloaded_track(title: str) -> str:
        return f"Downloaded Track: {title}"


class AuditLogger:
    """
    Appends audit entries without ever failing the caller.

    Each entry is written in its own transaction, so a failed audit write
    cannot roll back the operation that triggered it. Failures are logged
    with their traceback for process-level error reporting.
    """

    def __init__(self, store: CredentialStore):
        self.store = store

    async def record(
        self,
        account_id: Optional[uuid.UUID],
        action: str,
        origin_address: Optional[str],
    ) -> bool:
        """Append an audit entry; returns False if it could not be written."""
        try:
            await self.store.append_audit_entry(account_id, action, origin_address)
            return True
        except Exception:
            logger.exception(
                f"Failed to write audit entry '{action}' for account {account_id}"
            )
            return False

    async def recent_entries(self, limit: int = 100) -> List[Any]:
        """Latest audit entries joined with the acting username."""
        return await self.store.list_audit_entries(limit=limit)
