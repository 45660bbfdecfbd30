"""Common FastAPI dependencies."""

from fastapi import Request

from src.core.settings import Settings
from src.services.account_service import AccountService
from src.services.audit_logger import AuditLogger
from src.services.credential_store import CredentialStore
from src.services.session_issuer import SessionIssuer
from src.services.track_service import TrackService


def get_origin_address(request: Request) -> str:
    """
    Client address used for rate limiting and the audit trail.

    The socket peer is used unless ``trust_proxy_headers`` is set. Behind
    ``trusted_proxy_hops`` reverse proxies, each proxy appends the address it
    saw to X-Forwarded-For, so the client is that many entries from the
    right. Entries further left are client supplied and never used.
    """
    settings: Settings = request.app.state.settings

    if settings.trust_proxy_headers:
        forwarded_for = request.headers.get("x-forwarded-for")
        if forwarded_for:
            hops = [hop.strip() for hop in forwarded_for.split(",") if hop.strip()]
            if hops:
                return hops[-min(settings.trusted_proxy_hops, len(hops))]

    if request.client:
        return request.client.host

    return "unknown"


def get_store(request: Request) -> CredentialStore:
    return request.app.state.store


def get_audit_logger(request: Request) -> AuditLogger:
    return request.app.state.audit_logger


def get_session_issuer(request: Request) -> SessionIssuer:
    return request.app.state.session_issuer


def get_account_service(request: Request) -> AccountService:
    return request.app.state.account_service


def get_track_service(request: Request) -> TrackService:
    return request.app.state.track_service
