"""
Services Module
Business logic layer for the MedTrack application
"""

from services.exceptions import (
    MedTrackError,
    NotFoundError,
    DuplicateEmailError,
    InvalidCredentialsError,
    InvalidTokenError,
    AssistantUnavailableError,
    AssistantResponseError,
)
from services.auth_service import AuthService, auth_service
from services.user_service import UserService, user_service
from services.medicine_service import MedicineService, medicine_service
from services.dose_log_service import DoseLogService, dose_log_service
from services.analytics_service import AnalyticsService, analytics_service
from services.llm_service import LLMService
from services.assistant_service import AssistantService


__all__ = [
    # Errors
    "MedTrackError",
    "NotFoundError",
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "InvalidTokenError",
    "AssistantUnavailableError",
    "AssistantResponseError",
    # Service classes
    "AuthService",
    "UserService",
    "MedicineService",
    "DoseLogService",
    "AnalyticsService",
    "LLMService",
    "AssistantService",
    # Singleton instances
    "auth_service",
    "user_service",
    "medicine_service",
    "dose_log_service",
    "analytics_service",
]
