"""Database models for the track marketplace service."""

from .base import BaseModel, TimestampMixin
from .account import Account, Role
from .track import ReleaseType, Track
from .sale_record import SaleRecord
from .audit_log import AuditLogEntry
from .user_session import UserSession

__all__ = [
    "BaseModel",
    "TimestampMixin",
    "Account",
    "Role",
    "ReleaseType",
    "Track",
    "SaleRecord",
    "AuditLogEntry",
    "UserSession",
]
