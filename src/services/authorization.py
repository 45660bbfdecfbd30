"""Authorization gate: session presence plus role membership."""

from enum import Enum
from typing import Optional

from src.models.account import Role
from src.services.errors import ForbiddenError, UnauthenticatedError
from src.services.session_issuer import SessionContext


class AccessDecision(str, Enum):
    ALLOW = "allow"
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"


def check_access(
    session: Optional[SessionContext],
    required_role: Optional[Role] = None,
) -> AccessDecision:
    """Decide access for one operation. ``required_role=None`` admits any session."""
    if session is None:
        return AccessDecision.UNAUTHENTICATED
    if required_role is not None and not session.role.can_act_as(required_role):
        return AccessDecision.FORBIDDEN
    return AccessDecision.ALLOW


def authorize(
    session: Optional[SessionContext],
    required_role: Optional[Role] = None,
) -> SessionContext:
    """Raise the matching error unless access is allowed; returns the session."""
    decision = check_access(session, required_role)
    if decision is AccessDecision.UNAUTHENTICATED:
        raise UnauthenticatedError()
    if decision is AccessDecision.FORBIDDEN:
        raise ForbiddenError(f"{required_role.value} only")
    return session
