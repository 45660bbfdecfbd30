"""Salted, tunable password hashing backed by passlib's bcrypt scheme."""

import logging

from passlib.context import CryptContext
from passlib.exc import PasswordSizeError
from starlette.concurrency import run_in_threadpool

from src.services.errors import HashingError

logger = logging.getLogger(__name__)


class PasswordHasher:
    """
    One-way password hashing with a configurable bcrypt work factor.

    Digests use the modular crypt format (``$2b$<rounds>$<salt><hash>``), so
    each one records the parameters it was produced with and
    ``needs_rehash`` can spot digests made under an older work factor.
    bcrypt is CPU bound; every call runs in the threadpool so hashing does
    not stall other requests on the event loop.
    """

    def __init__(self, rounds: int = 12):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=rounds,
        )

    async def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh random salt."""
        try:
            return await run_in_threadpool(self._context.hash, plaintext)
        except Exception as e:
            logger.error(f"Password hashing failed: {type(e).__name__}")
            raise HashingError() from e

    async def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a stored digest.

        A mismatch is a normal ``False``, and so is a password too large for
        the backend to hash. A digest that cannot be parsed means the stored
        credential is corrupt and raises ``HashingError``.
        """
        try:
            return await run_in_threadpool(self._context.verify, plaintext, digest)
        except PasswordSizeError:
            logger.warning("Password exceeds the hashing backend size limit")
            return False
        except (ValueError, TypeError) as e:
            logger.error(f"Stored password digest could not be verified: {e}")
            raise HashingError() from e

    async def dummy_verify(self) -> None:
        """Spend the cost of a verification without a real digest."""
        await run_in_threadpool(self._context.dummy_verify)

    def needs_rehash(self, digest: str) -> bool:
        """True when the digest was produced with other parameters."""
        try:
            return self._context.needs_update(digest)
        except ValueError:
            return True
