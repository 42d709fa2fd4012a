"""
Domain errors raised by the service layer.

Each error carries the HTTP status it maps to; main.py turns them into
``{"message": ...}`` JSON responses.
"""
from fastapi import status


class MaySpaceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(MaySpaceError):
    """Missing or malformed input (also used for invalid arguments)."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class UnauthorizedError(MaySpaceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class ForbiddenError(MaySpaceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized to perform this action"


class NotFoundError(MaySpaceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(MaySpaceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Conflict"


class InternalError(MaySpaceError):
    pass
