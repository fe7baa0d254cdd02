"""
Medicine Schemas
Pydantic models for medicine-related API requests and responses
"""

from typing import Optional
from datetime import datetime, date
from pydantic import BaseModel, Field, ConfigDict, field_validator

from config import settings


# 24-hour "HH:MM"
REMINDER_TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


# ==================== BASE SCHEMAS ====================

class MedicineBase(BaseModel):
    """Base medicine schema"""
    name: str = Field(..., min_length=1, max_length=255)
    dosage: str = Field(..., min_length=1, max_length=100)
    frequency: str = Field(..., min_length=1, max_length=100)
    time_of_day: Optional[str] = Field(None, max_length=100)
    instructions: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reminder_time: Optional[str] = Field(None, pattern=REMINDER_TIME_PATTERN)


# ==================== REQUEST SCHEMAS ====================

class MedicineCreate(MedicineBase):
    """Schema for adding a medicine"""
    pass


class MedicineUpdate(BaseModel):
    """Schema for updating a medicine; only sent fields change"""
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[str] = Field(None, min_length=1, max_length=100)
    time_of_day: Optional[str] = Field(None, max_length=100)
    instructions: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    reminder_time: Optional[str] = Field(None, pattern=REMINDER_TIME_PATTERN)

    @field_validator("name", "dosage", "frequency")
    @classmethod
    def required_fields_not_null(cls, value: Optional[str]) -> str:
        if value is None:
            raise ValueError("may be omitted but not set to null")
        return value


class SnoozeRequest(BaseModel):
    """Postpone reminders; zero or negative minutes leave an expired snooze"""
    minutes: int = settings.DEFAULT_SNOOZE_MINUTES


# ==================== RESPONSE SCHEMAS ====================

class MedicineResponse(MedicineBase):
    """Schema for medicine response"""
    id: int
    user_id: int
    snoozed_until: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class SnoozeResponse(BaseModel):
    success: bool = True
    snoozed_until: datetime


class MedicineDeleteResponse(BaseModel):
    success: bool = True
    removed_logs: int = 0
