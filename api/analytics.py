"""
Analytics API Router
Endpoints for adherence aggregates
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user, services
from api.schemas.analytics import (
    AdherenceSummaryResponse,
    BehaviorAnalysisResponse,
    DailyStatResponse,
)
from models import User


router = APIRouter(tags=["analytics"])


@router.get("/analytics", response_model=List[DailyStatResponse])
async def get_analytics(
    days: Optional[int] = Query(None, ge=1, le=366, description="Only count the last N days"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Daily completion series, ascending by date, most recent 30 days with doses
    """
    analytics_service = services.get_analytics_service()
    return await analytics_service.get_daily_series(current_user.id, days, db=db)


@router.get("/analytics/summary", response_model=AdherenceSummaryResponse)
async def get_analytics_summary(
    days: Optional[int] = Query(None, ge=1, le=366),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Streak, doses missed in the last 7 entries, and best weekday
    """
    analytics_service = services.get_analytics_service()
    return await analytics_service.get_summary(current_user.id, days, db=db)


@router.get("/behavior-analysis", response_model=BehaviorAnalysisResponse)
async def get_behavior_analysis(
    days: Optional[int] = Query(None, ge=1, le=366),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Day-of-week adherence, per-medicine adherence and timing delays
    """
    analytics_service = services.get_analytics_service()
    return await analytics_service.get_behavior_analysis(current_user.id, days, db=db)
