"""Credential store adapter over the SQLAlchemy async engine.

Every public method runs in its own session and transaction, bounded by a
timeout. Concurrent requests therefore never share a session, and the two
race-prone mutations (failed-attempt counting and sale recording) are
single statements guarded by the database itself.
"""

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable, List, Optional, Tuple, TypeVar

from sqlalchemy import func, or_, select, text, update
from sqlalchemy.exc import IntegrityError, InterfaceError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.models.account import Account, Role
from src.models.audit_log import AuditLogEntry
from src.models.sale_record import SaleRecord
from src.models.track import Track
from src.models.user_session import UserSession
from src.services.errors import NotFoundError, StoreUnavailableError, UsernameTakenError
from src.services.lockout import LOCKOUT_THRESHOLD, LockoutState

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CredentialStore:
    """Atomic reads and writes for accounts, sessions, tracks, sales and audit entries."""

    def __init__(self, sessionmaker: async_sessionmaker, timeout: float = 5.0):
        self._sessionmaker = sessionmaker
        self.timeout = timeout

    async def _run(
        self,
        description: str,
        operation: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """Run one logical operation in a fresh transaction under the store timeout."""

        async def _work() -> T:
            async with self._sessionmaker() as session:
                async with session.begin():
                    return await operation(session)

        try:
            return await asyncio.wait_for(_work(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            logger.error(f"Store operation timed out after {self.timeout}s: {description}")
            raise StoreUnavailableError() from e
        except (OperationalError, InterfaceError) as e:
            logger.error(f"Store unavailable during {description}: {e}")
            raise StoreUnavailableError() from e

    async def ping(self) -> bool:
        async def _ping(session: AsyncSession) -> bool:
            result = await session.execute(text("SELECT 1"))
            return result.scalar() == 1

        return await self._run("ping", _ping)

    # Accounts

    async def create_account(self, username: str, password_hash: str, role: Role) -> Account:
        """Insert an account; the unique username constraint decides races."""

        async def _create(session: AsyncSession) -> Account:
            account = Account(
                username=username,
                password_hash=password_hash,
                role=role.value,
                is_locked=False,
                failed_attempts=0,
            )
            session.add(account)
            await session.flush()
            return account

        try:
            return await self._run("create account", _create)
        except IntegrityError as e:
            logger.info(f"Username already registered: {username}")
            raise UsernameTakenError() from e

    async def get_account_by_username(self, username: str) -> Optional[Account]:
        async def _get(session: AsyncSession) -> Optional[Account]:
            result = await session.execute(select(Account).where(Account.username == username))
            return result.scalar_one_or_none()

        return await self._run("load account by username", _get)

    async def get_account(self, account_id: uuid.UUID) -> Optional[Account]:
        async def _get(session: AsyncSession) -> Optional[Account]:
            return await session.get(Account, account_id)

        return await self._run("load account", _get)

    async def record_failed_attempt(
        self,
        account_id: uuid.UUID,
        threshold: int = LOCKOUT_THRESHOLD,
    ) -> LockoutState:
        """Atomically increment the failure counter and lock at the threshold.

        The increment and the lock decision are one UPDATE, so concurrent
        failures for the same account can never under-count.
        """

        async def _increment(session: AsyncSession) -> LockoutState:
            next_attempts = Account.failed_attempts + 1
            await session.execute(
                update(Account)
                .where(Account.id == account_id)
                .values(
                    failed_attempts=next_attempts,
                    is_locked=or_(Account.is_locked, next_attempts >= threshold),
                )
                .execution_options(synchronize_session=False)
            )
            row = (
                await session.execute(
                    select(Account.failed_attempts, Account.is_locked).where(Account.id == account_id)
                )
            ).one()
            return LockoutState(failed_attempts=row.failed_attempts, is_locked=bool(row.is_locked))

        return await self._run("record failed attempt", _increment)

    async def reset_failed_attempts(self, account_id: uuid.UUID) -> bool:
        """Clear the failure counter unless the account got locked meanwhile.

        Returns False when the account is locked, in which case nothing changes.
        """

        async def _reset(session: AsyncSession) -> bool:
            result = await session.execute(
                update(Account)
                .where(Account.id == account_id, Account.is_locked.is_(False))
                .values(failed_attempts=0)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

        return await self._run("reset failed attempts", _reset)

    async def update_password_hash(self, account_id: uuid.UUID, password_hash: str) -> None:
        async def _update(session: AsyncSession) -> None:
            await session.execute(
                update(Account)
                .where(Account.id == account_id)
                .values(password_hash=password_hash)
                .execution_options(synchronize_session=False)
            )

        await self._run("update password hash", _update)

    # Sessions

    async def create_session(
        self,
        session_key_hash: str,
        account: Account,
        origin_address: Optional[str],
        expires_at: datetime,
    ) -> UserSession:
        async def _create(session: AsyncSession) -> UserSession:
            user_session = UserSession(
                session_key_hash=session_key_hash,
                account_id=account.id,
                username=account.username,
                role=account.role,
                origin_address=origin_address,
                expires_at=expires_at,
            )
            session.add(user_session)
            await session.flush()
            return user_session

        return await self._run("create session", _create)

    async def get_session(self, session_key_hash: str) -> Optional[UserSession]:
        async def _get(session: AsyncSession) -> Optional[UserSession]:
            result = await session.execute(
                select(UserSession).where(UserSession.session_key_hash == session_key_hash)
            )
            return result.scalar_one_or_none()

        return await self._run("load session", _get)

    async def delete_session(self, session_key_hash: str) -> bool:
        async def _delete(session: AsyncSession) -> bool:
            result = await session.execute(
                select(UserSession).where(UserSession.session_key_hash == session_key_hash)
            )
            user_session = result.scalar_one_or_none()
            if user_session is None:
                return False
            await session.delete(user_session)
            return True

        return await self._run("delete session", _delete)

    # Tracks

    async def create_track(
        self,
        artist_id: uuid.UUID,
        title: str,
        release_type: str,
        genre: str,
        content_ref: str,
    ) -> Track:
        async def _create(session: AsyncSession) -> Track:
            track = Track(
                artist_id=artist_id,
                title=title,
                release_type=release_type,
                genre=genre or "Other",
                content_ref=content_ref,
            )
            session.add(track)
            await session.flush()
            return track

        return await self._run("create track", _create)

    async def get_track(self, track_id: uuid.UUID) -> Optional[Track]:
        async def _get(session: AsyncSession) -> Optional[Track]:
            return await session.get(Track, track_id)

        return await self._run("load track", _get)

    # Sales

    async def insert_sale_if_absent(
        self,
        track_id: uuid.UUID,
        fan_id: uuid.UUID,
        amount: int,
    ) -> Tuple[SaleRecord, bool]:
        """Insert-or-ignore on the (track_id, fan_id) unique constraint.

        Returns the stored record and whether this call created it. A losing
        concurrent request gets the winner's record back.
        """

        async def _insert(session: AsyncSession) -> SaleRecord:
            sale = SaleRecord(track_id=track_id, fan_id=fan_id, amount=amount)
            session.add(sale)
            await session.flush()
            return sale

        try:
            return await self._run("insert sale", _insert), True
        except IntegrityError as e:
            existing = await self.get_sale(track_id, fan_id)
            if existing is None:
                # Not a duplicate: the track or account vanished underneath us
                raise NotFoundError() from e
            return existing, False

    async def get_sale(self, track_id: uuid.UUID, fan_id: uuid.UUID) -> Optional[SaleRecord]:
        async def _get(session: AsyncSession) -> Optional[SaleRecord]:
            result = await session.execute(
                select(SaleRecord).where(
                    SaleRecord.track_id == track_id,
                    SaleRecord.fan_id == fan_id,
                )
            )
            return result.scalar_one_or_none()

        return await self._run("load sale", _get)

    async def count_sales(self, track_id: uuid.UUID, fan_id: Optional[uuid.UUID] = None) -> int:
        async def _count(session: AsyncSession) -> int:
            query = select(func.count(SaleRecord.id)).where(SaleRecord.track_id == track_id)
            if fan_id is not None:
                query = query.where(SaleRecord.fan_id == fan_id)
            return (await session.execute(query)).scalar_one()

        return await self._run("count sales", _count)

    async def list_artist_sales(self, artist_id: uuid.UUID) -> List[Any]:
        """Sales of an artist's tracks, newest first, with track and fan details."""

        async def _list(session: AsyncSession) -> List[Any]:
            result = await session.execute(
                select(
                    SaleRecord,
                    Track.title,
                    Track.release_type,
                    Account.username.label("fan_name"),
                )
                .join(Track, SaleRecord.track_id == Track.id)
                .join(Account, SaleRecord.fan_id == Account.id)
                .where(Track.artist_id == artist_id)
                .order_by(SaleRecord.created_at.desc())
            )
            return list(result.all())

        return await self._run("list artist sales", _list)

    # Audit log

    async def append_audit_entry(
        self,
        account_id: Optional[uuid.UUID],
        action: str,
        origin_address: Optional[str],
    ) -> AuditLogEntry:
        async def _append(session: AsyncSession) -> AuditLogEntry:
            entry = AuditLogEntry(
                account_id=account_id,
                action=action,
                origin_address=origin_address,
            )
            session.add(entry)
            await session.flush()
            return entry

        return await self._run("append audit entry", _append)

    async def list_audit_entries(self, limit: int = 100) -> List[Any]:
        """Most recent audit entries with the acting username, if any."""

        async def _list(session: AsyncSession) -> List[Any]:
            result = await session.execute(
                select(AuditLogEntry, Account.username)
                .outerjoin(Account, AuditLogEntry.account_id == Account.id)
                .order_by(AuditLogEntry.created_at.desc())
                .limit(limit)
            )
            return list(result.all())

        return await self._run("list audit entries", _list)
