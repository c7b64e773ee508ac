"""Custom exception classes for the municipal portal."""

from typing import Any, Dict, List, Optional

from fastapi import status


class PortalError(Exception):
    """Base exception for the portal."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class AuthenticationError(PortalError):
    """Raised when authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED


class AuthorizationError(PortalError):
    """Raised when user lacks permission."""
    status_code = status.HTTP_403_FORBIDDEN


class ResourceNotFoundError(PortalError):
    """Raised when a requested resource is not found."""
    status_code = status.HTTP_404_NOT_FOUND


class ResourceConflictError(PortalError):
    """Raised when an operation conflicts with the current state of a resource."""
    status_code = status.HTTP_409_CONFLICT


class ValidationError(PortalError):
    """Raised when input validation fails.

    ``errors`` maps field names to a list of messages. ``input`` is the
    submitted payload, returned to the caller untouched so a form can be
    re-filled.
    """
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY

    def __init__(
        self,
        errors: Dict[str, List[str]],
        input: Optional[Dict[str, Any]] = None,
        message: str = "The given data was invalid.",
    ):
        super().__init__(message)
        self.errors = errors
        self.input = input or {}

    @classmethod
    def for_field(cls, field: str, message: str, input: Optional[Dict[str, Any]] = None):
        return cls({field: [message]}, input)


class StorageError(PortalError):
    """Raised when a file storage operation fails."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
