"""
User Schemas
Pydantic models for accounts, authentication and preferences
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, EmailStr, ConfigDict

from models import ReminderSound


# ==================== REQUEST SCHEMAS ====================

class SignupRequest(BaseModel):
    """Schema for creating an account"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)
    name: str = Field(..., min_length=1, max_length=255)


class LoginRequest(BaseModel):
    """Schema for logging in"""
    email: EmailStr
    password: str = Field(..., min_length=1, max_length=128)


class SettingsUpdate(BaseModel):
    """
    Partial preference update.
    Omitted fields are left alone; ``custom_sound_data`` may be sent as null
    to clear an uploaded tone.
    """
    reminder_sound: Optional[ReminderSound] = None
    custom_sound_data: Optional[str] = None
    language: Optional[str] = Field(None, min_length=1, max_length=20)


# ==================== RESPONSE SCHEMAS ====================

class UserResponse(BaseModel):
    """Public view of a user; never includes the password hash"""
    id: int
    email: str
    name: str
    reminder_sound: str = ReminderSound.DEFAULT.value
    custom_sound_data: Optional[str] = None
    language: str = "en"
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AuthResponse(BaseModel):
    token: str
    user: UserResponse


class SettingsUpdateResponse(BaseModel):
    success: bool = True
    user: UserResponse
