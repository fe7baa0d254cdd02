"""
Client Errors
Exceptions raised by the MedTrack API client, one per failure class
"""

from typing import Any, Dict, Optional


class ClientError(Exception):
    """Base class for API client errors"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        payload: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload or {}


class AuthenticationError(ClientError):
    """Missing, invalid or expired token (401/403); the user must log in again"""


class NotFoundError(ClientError):
    """Record does not exist or belongs to someone else (404)"""


class BackendUnavailableError(ClientError):
    """Backend or its database is down (503), or never answered"""


class RequestValidationError(ClientError):
    """Rejected input, including duplicate email (400/422)"""


class AssistantError(ClientError):
    """Language assistant answered with something unusable (502)"""


class ApiError(ClientError):
    """Any other non-success response"""


def error_for_status(
    status_code: int,
    message: str,
    payload: Optional[Dict[str, Any]] = None
) -> ClientError:
    """Map an HTTP status to the matching client error"""
    if status_code in (401, 403):
        error_class = AuthenticationError
    elif status_code == 404:
        error_class = NotFoundError
    elif status_code == 503:
        error_class = BackendUnavailableError
    elif status_code in (400, 422):
        error_class = RequestValidationError
    elif status_code == 502:
        error_class = AssistantError
    else:
        error_class = ApiError
    return error_class(message, status_code=status_code, payload=payload)
