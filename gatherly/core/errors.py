"""
Service error taxonomy.

Every failure that crosses a module boundary is one of these. Services raise
them, routes let them propagate, and the handler registered in main.py turns
them into JSON responses with the matching status code.
"""

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAVAILABLE = "unavailable"


class ServiceError(Exception):
    """Base class for all tagged service failures."""

    kind: ErrorKind
    status_code: int = 500
    user_message: str = "An error occurred while processing your request. Please try again later."

    def __init__(self, message: str, source: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.source = source

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.message,
            "userMessage": self.user_message,
            "kind": self.kind.value,
            "source": self.source,
        }


class Unauthenticated(ServiceError):
    """Credential missing, malformed, rejected, or its principal is gone."""

    kind = ErrorKind.UNAUTHENTICATED
    status_code = 401
    user_message = "You are not authorized to perform this action."


class CredentialExpired(Unauthenticated):
    """The credential verifier accepted the token format but it has expired."""

    user_message = "Your session has expired. Please log in again."


class Forbidden(ServiceError):
    kind = ErrorKind.FORBIDDEN
    status_code = 403
    user_message = "You are not allowed to perform this action."


class NotFound(ServiceError):
    kind = ErrorKind.NOT_FOUND
    status_code = 404
    user_message = "The resource you're looking for could not be found."


class Conflict(ServiceError):
    kind = ErrorKind.CONFLICT
    status_code = 409
    user_message = "This action conflicts with the current state of the resource."


class Unavailable(ServiceError):
    kind = ErrorKind.UNAVAILABLE
    status_code = 503
    user_message = "The service is temporarily unavailable. Please try again later."


ERRORS_BY_KIND = {
    ErrorKind.UNAUTHENTICATED: Unauthenticated,
    ErrorKind.FORBIDDEN: Forbidden,
    ErrorKind.NOT_FOUND: NotFound,
    ErrorKind.CONFLICT: Conflict,
    ErrorKind.UNAVAILABLE: Unavailable,
}


def error_for(kind: ErrorKind, message: str, source: Optional[str] = None) -> ServiceError:
    return ERRORS_BY_KIND[kind](message, source)
