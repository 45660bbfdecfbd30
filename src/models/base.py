"""Base model classes and mixins."""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, UUID

from src.core.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TimestampMixin:
    """Mixin for adding a created_at timestamp."""

    created_at = Column(
        DateTime(timezone=True),
        default=utcnow,
        nullable=False,
        comment="Record creation timestamp"
    )


class BaseModel(Base, TimestampMixin):
    """
    Base model class with a UUID primary key and creation timestamp.

    Every marketplace entity (accounts, tracks, sales, audit entries and
    sessions) inherits from this model so identifiers and serialization
    behave the same way across tables.
    """

    __abstract__ = True

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        comment="Primary key UUID"
    )

    def __repr__(self) -> str:
        """String representation of the model."""
        return f"<{self.__class__.__name__}(id={self.id})>"
