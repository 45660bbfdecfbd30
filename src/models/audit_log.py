"""Append-only audit log model."""

from sqlalchemy import Column, ForeignKey, Index, String, UUID

from .base import BaseModel


class AuditLogEntry(BaseModel):
    """Immutable record of a security-relevant action."""

    __tablename__ = "audit_logs"

    account_id = Column(
        UUID(as_uuid=True),
        ForeignKey("accounts.id", ondelete="SET NULL"),
        nullable=True,
        comment="Acting account, null for anonymous actions"
    )

    action = Column(
        String(255),
        nullable=False,
        comment="Human-readable action description"
    )

    origin_address = Column(
        String(64),
        nullable=True,
        comment="Network address the request was attributed to"
    )

    __table_args__ = (
        Index("idx_audit_logs_created_at", "created_at"),
    )
