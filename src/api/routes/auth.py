"""Authentication API endpoints."""

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response

from src.api.dependencies.common import get_account_service, get_origin_address
from src.middleware.auth import get_current_session
from src.middleware.rate_limiting import enforce_auth_rate_limit
from src.schemas.auth import LoginRequest, RegisterRequest, SessionResponse, SessionUser
from src.schemas.base import SuccessResponse
from src.services.account_service import AccountService
from src.services.session_issuer import SessionContext

router = APIRouter()


def _session_user(session: SessionContext) -> SessionUser:
    return SessionUser(**session.public_view())


@router.post(
    "/register",
    response_model=SuccessResponse,
    dependencies=[Depends(enforce_auth_rate_limit)],
)
async def register(
    payload: RegisterRequest,
    request: Request,
    service: AccountService = Depends(get_account_service),
):
    """Register an Artist or Fan account."""
    await service.register(
        payload.username,
        payload.password,
        payload.role.to_role(),
        get_origin_address(request),
    )
    return SuccessResponse()


@router.post(
    "/login",
    response_model=SessionResponse,
    dependencies=[Depends(enforce_auth_rate_limit)],
)
async def login(
    payload: LoginRequest,
    request: Request,
    response: Response,
    service: AccountService = Depends(get_account_service),
):
    """
    Authenticate with username and password.

    On success the opaque session key is returned in an HttpOnly cookie;
    the body only carries the account's id, username and role.
    """
    session = await service.login(payload.username, payload.password, get_origin_address(request))

    settings = request.app.state.settings
    response.set_cookie(
        key=settings.session_cookie_name,
        value=session.key,
        max_age=settings.session_ttl_minutes * 60,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return SessionResponse(user=_session_user(session))


@router.post("/logout", response_model=SuccessResponse)
async def logout(
    request: Request,
    response: Response,
    session: Optional[SessionContext] = Depends(get_current_session),
    service: AccountService = Depends(get_account_service),
):
    """Destroy the current session, if any."""
    await service.logout(session, get_origin_address(request))
    response.delete_cookie(request.app.state.settings.session_cookie_name)
    return SuccessResponse()


@router.get("/me", response_model=SessionResponse)
async def current_user(session: Optional[SessionContext] = Depends(get_current_session)):
    """Return the logged-in account or null."""
    if session is None:
        return SessionResponse(user=None)
    return SessionResponse(user=_session_user(session))
