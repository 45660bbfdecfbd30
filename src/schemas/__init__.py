"""Pydantic schemas for request/response validation."""

from .base import *
from .auth import *
from .music import *

__all__ = [
    # Base schemas
    "BaseSchema",
    "SuccessResponse",
    "JSONAPIError",
    "JSONAPIErrorResponse",
    "HealthCheckResponse",

    # Auth schemas
    "RegistrableRole",
    "RegisterRequest",
    "LoginRequest",
    "SessionUser",
    "SessionResponse",

    # Music schemas
    "TrackResponse",
    "UploadResponse",
    "ArtistSaleResponse",
    "AuditLogResponse",
]
