"""
User Service
Profile lookup and preference updates
"""

import logging
from typing import Any, Dict, Optional
from sqlalchemy.orm import Session

import models
from services.exceptions import NotFoundError


logger = logging.getLogger(__name__)

SETTINGS_FIELDS = ("reminder_sound", "custom_sound_data", "language")


class UserService:
    """
    Service for user profile operations
    """

    async def get_user(self, user_id: int, db: Session) -> Optional[models.User]:
        return db.query(models.User).filter(models.User.id == user_id).first()

    async def update_settings(
        self,
        user_id: int,
        updates: Dict[str, Any],
        db: Session
    ) -> models.User:
        """
        Update reminder sound, custom sound payload and language.

        Only keys present in ``updates`` are applied, so a caller can clear
        ``custom_sound_data`` by sending it as None.
        """
        user = await self.get_user(user_id, db)
        if not user:
            raise NotFoundError("User", user_id)

        for field in SETTINGS_FIELDS:
            if field in updates:
                setattr(user, field, updates[field])

        db.commit()
        db.refresh(user)

        logger.info("Updated settings for user %s: %s", user_id, sorted(updates))
        return user


user_service = UserService()
