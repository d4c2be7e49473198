"""
Domain exceptions raised by services and translated to HTTP responses by the API.
"""

from typing import Any, Optional


class ProjectDeskError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthorizedError(ProjectDeskError):
    status_code = 401


class ForbiddenError(ProjectDeskError):
    status_code = 403


class NotFoundError(ProjectDeskError):
    status_code = 404


class ValidationError(ProjectDeskError, ValueError):
    """Malformed or semantically invalid input. Raised before any write."""

    status_code = 400


class CapacityExceededError(ValidationError):
    """
    The requested allocation would push the user over their weekly capacity.

    Carries the capacity arithmetic so callers can adjust the request.
    """

    def __init__(self, message: str, check: Optional[Any] = None):
        super().__init__(message)
        self.check = check
