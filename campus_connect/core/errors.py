"""
Error taxonomy shared by services and routes.

Each error is an HTTPException so FastAPI renders it as ``{"detail": ...}``
with the matching status code wherever it is raised.
"""
import uuid
from fastapi import HTTPException, status


class InvalidArgument(HTTPException):
    """Malformed identifier or missing/invalid field."""

    def __init__(self, detail: str = "Invalid request"):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class NotFound(HTTPException):
    """Referenced User or Event does not exist."""

    def __init__(self, detail: str = "Not found"):
        super().__init__(status_code=status.HTTP_404_NOT_FOUND, detail=detail)


class Conflict(HTTPException):
    """Duplicate registration or duplicate RSVP."""

    def __init__(self, detail: str = "Conflict", status_code: int = status.HTTP_400_BAD_REQUEST):
        super().__init__(status_code=status_code, detail=detail)


class Forbidden(HTTPException):
    def __init__(self, detail: str = "Forbidden"):
        super().__init__(status_code=status.HTTP_403_FORBIDDEN, detail=detail)


class InternalError(HTTPException):
    """Storage or transport failure."""

    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)


def parse_identifier(value, message: str = "Invalid identifier") -> uuid.UUID:
    """Parse a UUID path/body value, raising InvalidArgument when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise InvalidArgument(message)
