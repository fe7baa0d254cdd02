"""
Dose Log Schemas
Pydantic models for logging doses
"""

from typing import Optional
from datetime import datetime
from pydantic import BaseModel, ConfigDict

from models import DoseStatus


class DoseLogCreate(BaseModel):
    """Schema for logging a dose; ``taken_at`` defaults to now"""
    medicine_id: int
    taken_at: Optional[datetime] = None
    status: DoseStatus = DoseStatus.TAKEN


class DoseLogResponse(BaseModel):
    id: int
    user_id: int
    medicine_id: int
    taken_at: datetime
    status: str

    model_config = ConfigDict(from_attributes=True)


class DoseLogWithName(DoseLogResponse):
    """Log entry as listed, with the medicine name resolved"""
    medicine_name: str
