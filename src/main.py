"""Main FastAPI application for the Track Marketplace Service."""

import logging
from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse

from src.api.routes import admin, artist, auth, health, music
from src.core.database import DatabaseManager
from src.core.settings import Settings, get_settings
from src.middleware.logging import LoggingMiddleware, configure_logging
from src.middleware.rate_limiting import RateLimitMiddleware, SlidingWindowRateLimiter
from src.schemas.base import JSONAPIErrorResponse
from src.services.account_service import AccountService
from src.services.audit_logger import AuditLogger
from src.services.content_storage import LocalContentStorage
from src.services.credential_store import CredentialStore
from src.services.errors import HashingError, MarketplaceError
from src.services.password_hasher import PasswordHasher
from src.services.purchase_ledger import PurchaseLedger
from src.services.session_issuer import SessionIssuer
from src.services.track_service import TrackService

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status_code: {"model": JSONAPIErrorResponse}
    for status_code in (400, 401, 403, 404, 409, 429, 503)
}


def _error_response(request: Request, status_code: int, code: str, message: str, headers=None) -> JSONResponse:
    """Render an error in the JSON:API error format."""
    return JSONResponse(
        status_code=status_code,
        content={
            "errors": [{
                "status": str(status_code),
                "code": code,
                "title": message,
                "detail": message,
                "source": {"pointer": request.url.path}
            }]
        },
        headers=headers,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan management."""
    settings: Settings = app.state.settings
    database: DatabaseManager = app.state.database

    # Startup
    await database.connect()
    if settings.auto_create_schema:
        await database.create_all()
    if settings.bootstrap_admin_username and settings.bootstrap_admin_password:
        await app.state.account_service.ensure_admin(
            settings.bootstrap_admin_username,
            settings.bootstrap_admin_password,
        )
    yield
    # Shutdown
    await database.disconnect()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(HTTPException)
    async def http_exception_handler(request: Request, exc: HTTPException):
        """Handle HTTP exceptions with JSON:API format."""
        detail = exc.detail
        return _error_response(
            request,
            exc.status_code,
            detail.get("code", "HTTP_ERROR") if isinstance(detail, dict) else "HTTP_ERROR",
            detail.get("message", "HTTP Error") if isinstance(detail, dict) else str(detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(HashingError)
    async def hashing_error_handler(request: Request, exc: HashingError):
        """Hashing failures are environment faults, never credential errors."""
        logger.error(f"Password hashing failure on {request.url.path}", exc_info=exc)
        return await marketplace_error_handler(request, exc)

    @app.exception_handler(MarketplaceError)
    async def marketplace_error_handler(request: Request, exc: MarketplaceError):
        """Map domain errors to their stable status, code and message."""
        detail = exc.to_detail()
        return _error_response(request, exc.status_code, detail["code"], detail["message"], headers=exc.headers)

    @app.exception_handler(404)
    async def not_found_handler(request: Request, exc):
        """Handle 404 errors with JSON:API format."""
        if isinstance(exc, HTTPException) and isinstance(exc.detail, dict):
            return await http_exception_handler(request, exc)
        return _error_response(request, 404, "RESOURCE_NOT_FOUND", "The requested resource was not found")

    @app.exception_handler(500)
    async def internal_error_handler(request: Request, exc):
        """Handle 500 errors with JSON:API format."""
        logger.error(f"Unhandled error on {request.url.path}", exc_info=exc)
        return _error_response(request, 500, "INTERNAL_SERVER_ERROR", "An unexpected error occurred")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the application and wire every service onto ``app.state``."""
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Track Marketplace Service",
        description="Accounts, sessions, track acquisitions and audit trail for the track marketplace",
        version=health.SERVICE_VERSION,
        lifespan=lifespan,
        docs_url="/docs" if not settings.is_production else None,
        redoc_url="/redoc" if not settings.is_production else None,
        openapi_url="/openapi.json" if not settings.is_production else None,
    )

    database = DatabaseManager(settings)
    store = CredentialStore(database.sessionmaker, timeout=settings.store_timeout_seconds)
    hasher = PasswordHasher(rounds=settings.password_hash_rounds)
    audit_logger = AuditLogger(store)
    session_issuer = SessionIssuer(
        store,
        audit_logger,
        ttl=timedelta(minutes=settings.session_ttl_minutes),
    )

    app.state.settings = settings
    app.state.database = database
    app.state.store = store
    app.state.audit_logger = audit_logger
    app.state.session_issuer = session_issuer
    app.state.account_service = AccountService(store, hasher, session_issuer, audit_logger)
    app.state.track_service = TrackService(
        store,
        PurchaseLedger(store),
        LocalContentStorage(settings.upload_dir),
        audit_logger,
        allowed_extensions=settings.allowed_file_extensions,
        max_file_size=settings.max_file_size_bytes,
    )
    app.state.global_rate_limiter = SlidingWindowRateLimiter(
        limit=settings.global_rate_limit_requests,
        window=settings.global_rate_limit_window_seconds,
    )
    app.state.auth_rate_limiter = SlidingWindowRateLimiter(
        limit=settings.auth_rate_limit_requests,
        window=settings.auth_rate_limit_window_seconds,
    )

    # Middleware stack: the last one added runs first
    app.add_middleware(RateLimitMiddleware)
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

    register_exception_handlers(app)

    # Routes
    app.include_router(health.router, prefix="", tags=["system"])
    app.include_router(auth.router, prefix=f"{settings.api_prefix}/auth", tags=["auth"], responses=ERROR_RESPONSES)
    app.include_router(music.router, prefix=f"{settings.api_prefix}/music", tags=["music"], responses=ERROR_RESPONSES)
    app.include_router(artist.router, prefix=f"{settings.api_prefix}/artist", tags=["artist"], responses=ERROR_RESPONSES)
    app.include_router(admin.router, prefix=f"{settings.api_prefix}/admin", tags=["admin"], responses=ERROR_RESPONSES)

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": health.SERVICE_NAME,
            "version": health.SERVICE_VERSION,
            "status": "running",
        }

    return app


app = create_app()


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.log_level.lower(),
    )
