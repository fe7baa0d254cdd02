"""
Assistant API Router
Endpoints backed by the language model: medicine parsing, chat,
adherence insights, translation
"""

import logging
from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from api.deps import get_db, get_current_user, get_llm_service, services
from api.schemas.assistant import (
    ParseMedicineRequest,
    ParsedMedicineResponse,
    ChatRequest,
    ChatResponse,
    InsightsResponse,
    TranslateRequest,
    TranslateResponse,
    MedicineInsightResponse,
)
from models import User
from services.assistant_service import AssistantService
from services.exceptions import (
    AssistantResponseError,
    AssistantUnavailableError,
    NotFoundError,
)
from services.llm_service import LLMService


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assistant", tags=["assistant"])


def get_assistant(llm: LLMService = Depends(get_llm_service)) -> AssistantService:
    """Assistant bound to the application's model client"""
    if not llm.configured:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Language assistant is not configured"
        )
    return AssistantService(llm)


def _assistant_error(e: Exception) -> HTTPException:
    if isinstance(e, AssistantResponseError):
        return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(e))


@router.post("/parse-medicine", response_model=ParsedMedicineResponse)
async def parse_medicine(
    payload: ParseMedicineRequest,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant)
):
    """
    Parse free text such as "Amoxicillin 500mg three times a day for 7 days"
    into a structured medicine. Nothing is saved.
    """
    try:
        parsed = await assistant.parse_medicine(payload.text)
    except (AssistantResponseError, AssistantUnavailableError) as e:
        raise _assistant_error(e)
    return ParsedMedicineResponse(**parsed.model_dump())


@router.post("/chat", response_model=ChatResponse)
async def chat(
    payload: ChatRequest,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant)
):
    """
    Health chat in the user's language
    """
    history = [turn.model_dump() for turn in payload.history]
    try:
        reply = await assistant.chat(
            history,
            payload.message,
            language=payload.language or current_user.language
        )
    except (AssistantResponseError, AssistantUnavailableError) as e:
        raise _assistant_error(e)
    return ChatResponse(reply=reply)


@router.post("/insights", response_model=InsightsResponse)
async def behavior_insights(
    days: Optional[int] = Query(None, ge=1, le=366),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AssistantService = Depends(get_assistant)
):
    """
    Prose insights over the caller's behavior analysis
    """
    analytics_service = services.get_analytics_service()
    analysis = await analytics_service.get_behavior_analysis(current_user.id, days, db=db)

    try:
        insights = await assistant.behavior_insights(analysis, language=current_user.language)
    except (AssistantResponseError, AssistantUnavailableError) as e:
        raise _assistant_error(e)
    return InsightsResponse(insights=insights)


@router.post("/translate", response_model=TranslateResponse)
async def translate(
    payload: TranslateRequest,
    current_user: User = Depends(get_current_user),
    assistant: AssistantService = Depends(get_assistant)
):
    """
    Translate text; unchanged when the target is the default language
    """
    try:
        text = await assistant.translate(payload.text, payload.target_language)
    except (AssistantResponseError, AssistantUnavailableError) as e:
        raise _assistant_error(e)
    return TranslateResponse(text=text)


@router.post("/medicine-insights/{medicine_id}", response_model=MedicineInsightResponse)
async def medicine_insight(
    medicine_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
    assistant: AssistantService = Depends(get_assistant)
):
    """
    Short usage guide for one of the caller's medicines
    """
    medicine_service = services.get_medicine_service()
    try:
        medicine = await medicine_service.get_medicine(current_user.id, medicine_id, db)
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicine not found"
        )

    try:
        insight = await assistant.medicine_insight(
            medicine.name,
            medicine.dosage,
            medicine.frequency,
            instructions=medicine.instructions,
            language=current_user.language
        )
    except (AssistantResponseError, AssistantUnavailableError) as e:
        raise _assistant_error(e)
    return MedicineInsightResponse(medicine_id=medicine.id, insight=insight)
