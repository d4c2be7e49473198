"""
Translation of domain exceptions into HTTP responses.
"""

from fastapi import HTTPException, status

from projectdesk.errors import ProjectDeskError
from projectdesk.platform.config import get_settings
from projectdesk.platform.logging import get_logger

logger = get_logger(__name__)


def to_http_exception(exc: ProjectDeskError) -> HTTPException:
    return HTTPException(status_code=exc.status_code, detail=exc.message)


def internal_error(message: str, exc: Exception) -> HTTPException:
    """
    Log an unexpected failure with its cause and build a generic 500.
    The raw error string is only exposed in DEBUG.
    """
    logger.exception(message, error=str(exc))
    detail = {"message": message}
    if get_settings().DEBUG:
        detail["error"] = str(exc)
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
