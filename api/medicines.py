"""
Medicines API Router
Endpoints for medicine management and snoozing
"""

from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user, services
from api.schemas.medicine import (
    MedicineCreate,
    MedicineUpdate,
    MedicineResponse,
    MedicineDeleteResponse,
    SnoozeRequest,
    SnoozeResponse,
)
from models import User
from services.exceptions import NotFoundError


router = APIRouter(prefix="/medicines", tags=["medicines"])


def _medicine_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Medicine not found"
    )


@router.get("", response_model=List[MedicineResponse])
async def list_medicines(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    All medicines of the signed-in user
    """
    medicine_service = services.get_medicine_service()
    return await medicine_service.list_medicines(current_user.id, db)


@router.post("", response_model=MedicineResponse, status_code=status.HTTP_201_CREATED)
async def create_medicine(
    payload: MedicineCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Add a medicine

    - **name**: Medicine name
    - **dosage**: Dosage (e.g., "500mg")
    - **frequency**: Frequency description
    - **reminder_time**: Daily reminder as "HH:MM"
    """
    medicine_service = services.get_medicine_service()
    return await medicine_service.create_medicine(current_user.id, payload.model_dump(), db)


@router.get("/{medicine_id}", response_model=MedicineResponse)
async def get_medicine(
    medicine_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    medicine_service = services.get_medicine_service()
    try:
        return await medicine_service.get_medicine(current_user.id, medicine_id, db)
    except NotFoundError:
        raise _medicine_not_found()


@router.put("/{medicine_id}", response_model=MedicineResponse)
async def update_medicine(
    medicine_id: int,
    payload: MedicineUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update the fields sent in the body
    """
    medicine_service = services.get_medicine_service()
    try:
        return await medicine_service.update_medicine(
            current_user.id,
            medicine_id,
            payload.model_dump(exclude_unset=True),
            db
        )
    except NotFoundError:
        raise _medicine_not_found()


@router.delete("/{medicine_id}", response_model=MedicineDeleteResponse)
async def delete_medicine(
    medicine_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a medicine together with its dose logs
    """
    medicine_service = services.get_medicine_service()
    try:
        removed = await medicine_service.delete_medicine(current_user.id, medicine_id, db)
    except NotFoundError:
        raise _medicine_not_found()
    return MedicineDeleteResponse(success=True, removed_logs=removed)


@router.post("/{medicine_id}/snooze", response_model=SnoozeResponse)
async def snooze_medicine(
    medicine_id: int,
    payload: SnoozeRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Postpone reminders for a medicine by a number of minutes
    """
    medicine_service = services.get_medicine_service()
    try:
        snoozed_until = await medicine_service.snooze_medicine(
            current_user.id, medicine_id, payload.minutes, db
        )
    except NotFoundError:
        raise _medicine_not_found()
    return SnoozeResponse(success=True, snoozed_until=snoozed_until)
