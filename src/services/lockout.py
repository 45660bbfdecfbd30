"""Brute-force lockout policy.

Pure functions over the (failed_attempts, is_locked) pair of an account.
The credential store applies the same transition atomically in SQL; the
threshold lives here so both agree.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

LOCKOUT_THRESHOLD = 3


class LoginOutcome(str, Enum):
    SUCCESS = "success"
    INVALID_CREDENTIALS = "invalid_credentials"
    ACCOUNT_LOCKED = "account_locked"


@dataclass(frozen=True)
class LockoutState:
    failed_attempts: int = 0
    is_locked: bool = False


def precheck(state: LockoutState) -> Optional[LoginOutcome]:
    """Reject locked accounts before any password verification happens."""
    if state.is_locked:
        return LoginOutcome.ACCOUNT_LOCKED
    return None


def outcome_after_failure(state: LockoutState) -> LoginOutcome:
    """Classify the state left behind by a failed verification."""
    if state.is_locked:
        return LoginOutcome.ACCOUNT_LOCKED
    return LoginOutcome.INVALID_CREDENTIALS
