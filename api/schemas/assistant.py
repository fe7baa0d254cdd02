"""
Assistant Schemas
Pydantic models for the language assistant endpoints
"""

from typing import List, Literal, Optional
from pydantic import BaseModel, Field

from services.assistant_service import ParsedMedicine


# ==================== REQUEST SCHEMAS ====================

class ParseMedicineRequest(BaseModel):
    text: str = Field(..., min_length=1, max_length=2000)


class ChatTurn(BaseModel):
    role: Literal["user", "assistant", "model"]
    content: str


class ChatRequest(BaseModel):
    """Chat message with earlier turns; language defaults to the user's preference"""
    message: str = Field(..., min_length=1, max_length=4000)
    history: List[ChatTurn] = []
    language: Optional[str] = None


class TranslateRequest(BaseModel):
    text: str = ""
    target_language: Optional[str] = None


# ==================== RESPONSE SCHEMAS ====================

class ParsedMedicineResponse(ParsedMedicine):
    """Structured medicine extracted from free text"""
    pass


class ChatResponse(BaseModel):
    reply: str


class InsightsResponse(BaseModel):
    insights: str


class TranslateResponse(BaseModel):
    text: str


class MedicineInsightResponse(BaseModel):
    medicine_id: int
    insight: str
