"""Session resolution and role-gating dependencies."""

import logging
from typing import Optional

from fastapi import Depends, Request

from src.api.dependencies.common import get_session_issuer
from src.models.account import Role
from src.services.authorization import authorize
from src.services.session_issuer import SessionContext, SessionIssuer

logger = logging.getLogger(__name__)


async def get_current_session(
    request: Request,
    issuer: SessionIssuer = Depends(get_session_issuer),
) -> Optional[SessionContext]:
    """Resolve the session cookie on every request; None when absent or stale."""
    cookie_name = request.app.state.settings.session_cookie_name
    session = await issuer.current_session(request.cookies.get(cookie_name))

    # Exposed to the logging middleware
    request.state.account_id = str(session.account_id) if session else None
    return session


def require_role(required_role: Role):
    """Dependency to require a specific account role."""
    async def role_checker(
        session: Optional[SessionContext] = Depends(get_current_session),
    ) -> SessionContext:
        return authorize(session, required_role)
    return role_checker
