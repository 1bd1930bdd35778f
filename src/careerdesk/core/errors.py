from __future__ import annotations


class PortalError(Exception):
    """Base class for failures surfaced to callers as an error envelope."""

    status_code = 500
    public_message: str | None = None

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    @property
    def detail(self) -> str:
        return self.public_message or self.message


class ValidationError(PortalError):
    status_code = 400


class NotFound(PortalError):
    status_code = 404


class AuthorizationError(PortalError):
    status_code = 403


class NotAuthenticated(AuthorizationError):
    status_code = 401


class ConflictError(PortalError):
    status_code = 409


class RateLimited(PortalError):
    status_code = 429


class StorageError(PortalError):
    # The underlying driver message never leaves the process.
    public_message = "Storage failure, nothing was saved"


class CleanupWarning(PortalError):
    """A staged file could not be released. Logged, never returned to a caller."""


class DeliveryError(PortalError):
    status_code = 502
    public_message = "Failed to send email"
