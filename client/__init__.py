"""
Client Package
Async API client and dashboard session for MedTrack
"""

from .errors import (
    ClientError,
    AuthenticationError,
    NotFoundError,
    BackendUnavailableError,
    RequestValidationError,
    AssistantError,
    ApiError,
)
from .api_client import MedTrackClient
from .dashboard import DashboardSession, DashboardState, Toast


__all__ = [
    "ClientError",
    "AuthenticationError",
    "NotFoundError",
    "BackendUnavailableError",
    "RequestValidationError",
    "AssistantError",
    "ApiError",
    "MedTrackClient",
    "DashboardSession",
    "DashboardState",
    "Toast",
]
