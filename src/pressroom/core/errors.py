"""Error taxonomy shared by the service layer and the HTTP surface.

Services raise these exceptions; the FastAPI app renders them as
``{"detail": <message>, "code": <code>}`` with the matching status code.
"""

from __future__ import annotations

from fastapi import status


class ServiceError(RuntimeError):
    """Base exception for failures reported to API callers.

    Subclasses pin the HTTP status and a stable machine-checkable code.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal"
    default_message: str = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_payload(self) -> dict[str, str]:
        """Return the JSON body describing this error."""
        return {"detail": self.message, "code": self.code}


class Unauthenticated(ServiceError):
    """Raised when no valid credential accompanies a request that needs one."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_message = "Could not validate credentials"


class Forbidden(ServiceError):
    """Raised when the caller is known but lacks ownership or role."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"


class NotFound(ServiceError):
    """Raised when the requested entity does not exist (or is hidden)."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_message = "Not found"


class BadRequest(ServiceError):
    """Raised for missing or invalid input fields."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"
    default_message = "Bad request"


class Conflict(ServiceError):
    """Raised when a state transition lost a race or no longer applies."""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"
    default_message = "Conflict"


class InternalError(ServiceError):
    """Raised when the store fails during a mutation."""


__all__ = [
    "BadRequest",
    "Conflict",
    "Forbidden",
    "InternalError",
    "NotFound",
    "ServiceError",
    "Unauthenticated",
]
