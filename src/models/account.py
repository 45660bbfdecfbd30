"""Account model for marketplace identities."""

from enum import Enum

from sqlalchemy import Boolean, CheckConstraint, Column, Index, Integer, String

from .base import BaseModel


class Role(str, Enum):
    """Closed set of account roles."""

    ARTIST = "Artist"
    FAN = "Fan"
    ADMIN = "Admin"

    def can_act_as(self, required: "Role") -> bool:
        """Capability check used by the authorization gate.

        Roles do not inherit from one another: an Admin is not an Artist.
        """
        return self is required


class Account(BaseModel):
    """
    Registered identity with a credential and a role.

    Username and role are fixed at registration. The only mutable state is
    the brute-force lockout pair (``failed_attempts``, ``is_locked``) and the
    password digest, which is refreshed when the hashing work factor changes.
    Accounts are never deleted by the access-control core.
    """

    __tablename__ = "accounts"

    username = Column(
        String(20),
        nullable=False,
        unique=True,
        comment="Unique, immutable login name"
    )

    password_hash = Column(
        String(255),
        nullable=False,
        comment="Self-describing bcrypt digest"
    )

    role = Column(
        String(20),
        nullable=False,
        comment="Account role: Artist, Fan or Admin"
    )

    is_locked = Column(
        Boolean,
        nullable=False,
        default=False,
        comment="True once failed_attempts reached the lockout threshold"
    )

    failed_attempts = Column(
        Integer,
        nullable=False,
        default=0,
        comment="Count of consecutive failed login attempts"
    )

    __table_args__ = (
        CheckConstraint(
            "role IN ('Artist', 'Fan', 'Admin')",
            name="ck_accounts_role"
        ),
        CheckConstraint(
            "failed_attempts >= 0",
            name="ck_accounts_failed_attempts"
        ),
        Index("idx_accounts_username", "username"),
    )

    @property
    def account_role(self) -> Role:
        return Role(self.role)

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, username='{self.username}', role='{self.role}')>"
