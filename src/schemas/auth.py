"""Authentication request and response schemas."""

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import Field

from src.models.account import Role
from .base import BaseSchema


class RegistrableRole(str, Enum):
    """Roles open to self-registration; Admins are provisioned separately."""

    ARTIST = Role.ARTIST.value
    FAN = Role.FAN.value

    def to_role(self) -> Role:
        return Role(self.value)


class RegisterRequest(BaseSchema):
    """Account registration request.

    Username length and password strength are enforced by the account
    service so they produce the domain error codes.
    """

    class Config:
        str_strip_whitespace = False

    username: str = Field(..., max_length=100, description="Desired username (3 to 20 characters)")
    password: str = Field(..., max_length=256, description="Password meeting the strength policy")
    role: RegistrableRole = Field(..., description="Artist or Fan")


class LoginRequest(BaseSchema):
    """Username/password login request."""

    class Config:
        str_strip_whitespace = False

    username: str = Field(..., min_length=1, max_length=100, description="Username")
    password: str = Field(..., min_length=1, max_length=256, description="Password")


class SessionUser(BaseSchema):
    """Identity exposed for the logged-in account."""

    id: UUID = Field(..., description="Account identifier")
    username: str = Field(..., description="Username")
    role: Role = Field(..., description="Account role")


class SessionResponse(BaseSchema):
    """Current session user, or null when logged out."""

    user: Optional[SessionUser] = Field(None, description="Logged-in account")
