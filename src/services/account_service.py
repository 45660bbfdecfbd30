"""Account service: registration, login with lockout, and logout.

Login flow:
    1. Unknown username: spend a dummy verification, audit anonymously and
       fail with the same error a wrong password produces.
    2. Locked account: reject before touching the password digest.
    3. Verify the password off the event loop.
    4. Success resets the failure counter (unless a concurrent failure
       locked the account first) and issues a session.
    5. Failure increments the counter atomically; reaching the threshold
       locks the account and reports the lockout.
"""

import logging
from typing import Optional

from src.models.account import Account, Role
from src.services.audit_logger import AuditAction, AuditLogger
from src.services.credential_store import CredentialStore
from src.services.errors import (
    AccountLockedError,
    InvalidCredentialsError,
    InvalidUsernameError,
    WeakPasswordError,
)
from src.services.lockout import LockoutState, LoginOutcome, outcome_after_failure, precheck
from src.services.password_hasher import PasswordHasher
from src.services.session_issuer import SessionContext, SessionIssuer
from src.utils.validators import PasswordStrengthValidator, UsernameValidator

logger = logging.getLogger(__name__)


class AccountService:
    """Account lifecycle operations exposed to the request layer."""

    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        sessions: SessionIssuer,
        audit: AuditLogger,
    ):
        self.store = store
        self.hasher = hasher
        self.sessions = sessions
        self.audit = audit

    async def register(
        self,
        username: str,
        password: str,
        role: Role,
        origin_address: Optional[str] = None,
    ) -> Account:
        """
        Create an account.

        Raises:
            InvalidUsernameError: Username outside the allowed length
            WeakPasswordError: Password fails the strength policy
            UsernameTakenError: Username already registered
            HashingError: Hashing backend failure
        """
        username = UsernameValidator.normalize(username)
        if not UsernameValidator.is_valid(username):
            raise InvalidUsernameError()
        if not PasswordStrengthValidator.is_valid(password):
            errors = PasswordStrengthValidator.validate(password)
            raise WeakPasswordError(errors[0].message if errors else None)

        password_hash = await self.hasher.hash(password)
        account = await self.store.create_account(username, password_hash, role)

        await self.audit.record(account.id, AuditAction.USER_REGISTERED, origin_address)
        logger.info(f"Registered {role.value} account {account.id}")
        return account

    async def login(
        self,
        username: str,
        password: str,
        origin_address: Optional[str] = None,
    ) -> SessionContext:
        """
        Authenticate and issue a session.

        Raises:
            InvalidCredentialsError: Unknown username or wrong password
            AccountLockedError: Account is, or just became, locked
            HashingError: Stored digest unusable or hashing backend failure
        """
        username = UsernameValidator.normalize(username)
        account = await self.store.get_account_by_username(username)

        if account is None:
            await self.hasher.dummy_verify()
            await self.audit.record(None, AuditAction.FAILED_LOGIN_UNKNOWN_USER, origin_address)
            logger.warning("Authentication failed - unknown username")
            raise InvalidCredentialsError()

        state = LockoutState(failed_attempts=account.failed_attempts, is_locked=account.is_locked)
        if precheck(state) is LoginOutcome.ACCOUNT_LOCKED:
            await self.audit.record(account.id, AuditAction.LOGIN_REJECTED_LOCKED, origin_address)
            logger.warning(f"Login rejected for locked account {account.id}")
            raise AccountLockedError()

        if not await self.hasher.verify(password, account.password_hash):
            return await self._fail_login(account, origin_address)

        if not await self.store.reset_failed_attempts(account.id):
            # A concurrent failure locked the account after we read it
            await self.audit.record(account.id, AuditAction.LOGIN_REJECTED_LOCKED, origin_address)
            raise AccountLockedError()

        if self.hasher.needs_rehash(account.password_hash):
            await self.store.update_password_hash(account.id, await self.hasher.hash(password))
            logger.info(f"Upgraded password digest for account {account.id}")

        session = await self.sessions.issue(account, origin_address)
        await self.audit.record(account.id, AuditAction.USER_LOGIN, origin_address)
        logger.info(f"Successfully authenticated account {account.id}")
        return session

    async def _fail_login(self, account: Account, origin_address: Optional[str]):
        state = await self.store.record_failed_attempt(account.id)
        await self.audit.record(
            account.id,
            AuditAction.failed_login(state.failed_attempts),
            origin_address,
        )

        if outcome_after_failure(state) is LoginOutcome.ACCOUNT_LOCKED:
            logger.warning(
                f"Account {account.id} locked after {state.failed_attempts} failed attempts"
            )
            raise AccountLockedError()

        logger.warning(f"Authentication failed - invalid password for account {account.id}")
        raise InvalidCredentialsError()

    async def logout(self, session: Optional[SessionContext], origin_address: Optional[str] = None) -> None:
        """Destroy the session if there is one."""
        if session is None:
            return
        await self.sessions.destroy(session, origin_address)

    async def ensure_admin(self, username: str, password: str) -> Optional[Account]:
        """Create the bootstrap Admin account unless the username already exists."""
        existing = await self.store.get_account_by_username(UsernameValidator.normalize(username))
        if existing is not None:
            if existing.role != Role.ADMIN.value:
                logger.warning(f"Bootstrap admin username '{username}' belongs to a {existing.role}")
            return existing
        return await self.register(username, password, Role.ADMIN, origin_address="bootstrap")
