"""Validation utilities for account and upload data."""

import re
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Dict, Iterable, List, Optional


@dataclass
class ValidationError:
    """Validation error details."""
    field: str
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None


class PasswordStrengthValidator:
    """Password policy: 8 to 128 characters with an uppercase, a lowercase and a digit."""

    MIN_LENGTH = 8
    MAX_LENGTH = 128
    STRENGTH_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,}$", re.DOTALL)

    @classmethod
    def is_valid(cls, password: Optional[str]) -> bool:
        """Check whether a password satisfies the strength policy."""
        if not password or len(password) > cls.MAX_LENGTH:
            return False
        return bool(cls.STRENGTH_PATTERN.match(password))

    @classmethod
    def validate(cls, password: Optional[str]) -> List[ValidationError]:
        """List every policy rule the password breaks."""
        errors = []
        password = password or ""

        if len(password) < cls.MIN_LENGTH:
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_TOO_SHORT",
                message=f"Password must be at least {cls.MIN_LENGTH} characters",
                details={"min_length": cls.MIN_LENGTH}
            ))
        if len(password) > cls.MAX_LENGTH:
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_TOO_LONG",
                message=f"Password must be at most {cls.MAX_LENGTH} characters",
                details={"max_length": cls.MAX_LENGTH}
            ))
        if not re.search(r"[A-Z]", password):
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_MISSING_UPPERCASE",
                message="Password must contain an uppercase letter"
            ))
        if not re.search(r"[a-z]", password):
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_MISSING_LOWERCASE",
                message="Password must contain a lowercase letter"
            ))
        if not re.search(r"\d", password):
            errors.append(ValidationError(
                field="password",
                code="PASSWORD_MISSING_DIGIT",
                message="Password must contain a digit"
            ))

        return errors


class UsernameValidator:
    """Usernames are 3 to 20 characters once surrounding whitespace is removed."""

    MIN_LENGTH = 3
    MAX_LENGTH = 20

    @classmethod
    def normalize(cls, username: Optional[str]) -> str:
        return (username or "").strip()

    @classmethod
    def is_valid(cls, username: Optional[str]) -> bool:
        return cls.MIN_LENGTH <= len(cls.normalize(username)) <= cls.MAX_LENGTH


class UploadFileValidator:
    """Validator for uploaded track files."""

    @classmethod
    def extension_of(cls, filename: Optional[str]) -> str:
        if not filename:
            return ""
        return PurePath(filename).suffix.lower()

    @classmethod
    def validate(
        cls,
        filename: Optional[str],
        size: int,
        allowed_extensions: Iterable[str],
        max_size: int,
    ) -> List[ValidationError]:
        """Validate file extension and size."""
        errors = []
        allowed = set(allowed_extensions)
        extension = cls.extension_of(filename)

        if extension not in allowed:
            errors.append(ValidationError(
                field="file",
                code="INVALID_FILE_TYPE",
                message="Invalid file type",
                details={"provided": extension, "allowed": sorted(allowed)}
            ))
        if size == 0:
            errors.append(ValidationError(
                field="file",
                code="EMPTY_FILE",
                message="No file"
            ))
        elif size > max_size:
            errors.append(ValidationError(
                field="file",
                code="FILE_TOO_LARGE",
                message="File exceeds the maximum upload size",
                details={"max_bytes": max_size, "provided_bytes": size}
            ))

        return errors

