"""
User API Router
Endpoints for the signed-in user's profile and preferences
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from api.deps import get_db, get_current_user, services
from api.schemas.user import SettingsUpdate, SettingsUpdateResponse, UserResponse
from models import User
from services.exceptions import NotFoundError


router = APIRouter(prefix="/user", tags=["user"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """
    Current user's profile
    """
    return current_user


@router.put("/settings", response_model=SettingsUpdateResponse)
async def update_settings(
    payload: SettingsUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Update reminder sound, custom tone and language
    """
    user_service = services.get_user_service()

    updates = payload.model_dump(exclude_unset=True)
    # Only the custom tone is nullable
    updates = {
        key: value for key, value in updates.items()
        if value is not None or key == "custom_sound_data"
    }
    if "reminder_sound" in updates:
        updates["reminder_sound"] = updates["reminder_sound"].value

    try:
        user = await user_service.update_settings(current_user.id, updates, db)
    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e)
        )
    return SettingsUpdateResponse(success=True, user=user)
