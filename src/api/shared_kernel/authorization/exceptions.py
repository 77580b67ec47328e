"""Exceptions for bookmark authorization operations."""


class AuthorizationError(Exception):
    """Base exception for authorization errors."""

    pass


class PermissionDeniedError(AuthorizationError):
    """Raised when a decision denies the requested permission.

    Attributes:
        reason: The engine's reason for the denial
    """

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"access denied: {reason}")


class InvalidArgumentError(AuthorizationError):
    """Raised when a caller supplies a malformed code or identifier."""

    pass


class PermissionStoreError(AuthorizationError):
    """Raised when the permission store cannot complete an operation."""

    pass
