"""
Dose Logs API Router
Endpoints for recording and listing doses
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user, services
from api.schemas.dose_log import DoseLogCreate, DoseLogResponse, DoseLogWithName
from models import User
from services.exceptions import NotFoundError


router = APIRouter(prefix="/logs", tags=["logs"])


@router.get("", response_model=List[DoseLogWithName])
async def list_logs(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Dose logs, newest first, with medicine names
    """
    dose_log_service = services.get_dose_log_service()
    rows = await dose_log_service.list_logs_with_names(current_user.id, db)
    return [
        DoseLogWithName(
            id=log.id,
            user_id=log.user_id,
            medicine_id=log.medicine_id,
            taken_at=log.taken_at,
            status=log.status,
            medicine_name=name
        ) for log, name in rows
    ]


@router.post("", response_model=DoseLogResponse, status_code=status.HTTP_201_CREATED)
async def log_dose(
    payload: DoseLogCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Record a dose

    - **medicine_id**: One of the caller's medicines
    - **taken_at**: When it was taken (defaults to now)
    - **status**: taken, missed or skipped
    """
    dose_log_service = services.get_dose_log_service()
    try:
        return await dose_log_service.log_dose(
            current_user.id,
            payload.medicine_id,
            taken_at=payload.taken_at,
            status=payload.status,
            db=db
        )
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Medicine not found"
        )
