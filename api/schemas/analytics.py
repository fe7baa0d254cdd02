"""
Analytics Schemas
Pydantic models for adherence aggregates
"""

from typing import List
from pydantic import BaseModel, Field, ConfigDict


class DailyStatResponse(BaseModel):
    """Doses logged on one date (ISO ``YYYY-MM-DD``)"""
    date: str
    total: int
    taken: int

    model_config = ConfigDict(from_attributes=True)


class WeekdayStatResponse(BaseModel):
    day_index: int = Field(..., ge=0, le=6, description="0=Sunday .. 6=Saturday")
    total: int
    taken: int


class MedicineStatResponse(BaseModel):
    medicine_id: int
    name: str
    total: int
    taken: int


class DelaySampleResponse(BaseModel):
    medicine_id: int
    name: str
    delay: float = Field(..., description="Minutes after the reminder time; negative when early")


class BehaviorAnalysisResponse(BaseModel):
    day_of_week_stats: List[WeekdayStatResponse]
    medicine_stats: List[MedicineStatResponse]
    delays: List[DelaySampleResponse]


class AdherenceSummaryResponse(BaseModel):
    streak: int
    missed_last_7: int
    best_day: str
