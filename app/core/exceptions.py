"""Domain exceptions for the user directory."""

from fastapi import status


class DirectoryError(Exception):
    """Base exception for the user directory."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class AuthenticationFailed(DirectoryError):
    """Raised when no valid principal can be resolved from the request."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


class AuthorizationDenied(DirectoryError):
    """Raised when the decision engine denies an operation."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: str = "access denied"):
        self.reason = reason
        super().__init__(reason)


class NotFound(DirectoryError):
    """Raised when a target principal does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, message: str = "User not found"):
        super().__init__(message)


class ValidationFailure(DirectoryError):
    """Raised when input is malformed, before authorization or persistence."""

    status_code = status.HTTP_400_BAD_REQUEST


class AuditWriteFailure(DirectoryError):
    """Raised when an audit entry cannot be persisted.

    The mutation it describes has already been committed and is kept; callers
    report this failure to operators instead of the client.
    """
