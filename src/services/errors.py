"""Error taxonomy shared by the access-control and ledger services.

Each error carries the HTTP status, a stable machine-readable code and a
generic message. Credential errors never reveal whether a username exists.
"""

from typing import Any, Dict, Optional


class MarketplaceError(Exception):
    """Base exception for marketplace service errors."""

    status_code: int = 400
    code: str = "MARKETPLACE_ERROR"
    message: str = "Request could not be processed"

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        super().__init__(message or self.message)
        self.message = message or self.message
        self.headers = headers

    def to_detail(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class InvalidCredentialsError(MarketplaceError):
    """Unknown username or wrong password; the two are indistinguishable."""

    status_code = 401
    code = "INVALID_CREDENTIALS"
    message = "Invalid credentials"


class AccountLockedError(MarketplaceError):
    """Account reached the failed-attempt threshold."""

    status_code = 403
    code = "ACCOUNT_LOCKED"
    message = "Account locked due to failed login attempts"


class UsernameTakenError(MarketplaceError):
    status_code = 409
    code = "USERNAME_TAKEN"
    message = "Username taken"


class WeakPasswordError(MarketplaceError):
    status_code = 400
    code = "WEAK_PASSWORD"
    message = (
        "Password must be at least 8 characters and contain an uppercase "
        "letter, a lowercase letter and a digit"
    )


class InvalidUsernameError(MarketplaceError):
    status_code = 400
    code = "INVALID_USERNAME"
    message = "Username must be between 3 and 20 characters"


class UnauthenticatedError(MarketplaceError):
    status_code = 401
    code = "AUTHENTICATION_REQUIRED"
    message = "Login required"


class ForbiddenError(MarketplaceError):
    status_code = 403
    code = "INSUFFICIENT_PERMISSIONS"
    message = "Insufficient permissions for this operation"


class NotFoundError(MarketplaceError):
    status_code = 404
    code = "RESOURCE_NOT_FOUND"
    message = "Not found"


class ContentMissingError(NotFoundError):
    """Track exists but its stored content is gone."""

    code = "CONTENT_MISSING"
    message = "File missing"


class InvalidUploadError(MarketplaceError):
    status_code = 400
    code = "INVALID_UPLOAD"
    message = "Invalid upload"


class StoreUnavailableError(MarketplaceError):
    """Transient store failure; the caller may retry."""

    status_code = 503
    code = "STORE_UNAVAILABLE"
    message = "Service temporarily unavailable, please retry"

    def __init__(self, message: Optional[str] = None, retry_after: int = 1):
        super().__init__(message, headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


class HashingError(MarketplaceError):
    """Password hashing backend failed; not recoverable by retrying."""

    status_code = 500
    code = "HASHING_FAILURE"
    message = "Password hashing failed"
