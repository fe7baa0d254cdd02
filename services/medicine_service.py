"""
Medicine Service
Business logic for medicine management, scoped to the owning user
"""

import logging
from typing import Dict, List, Any
from datetime import datetime, timedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

import models
from services.exceptions import NotFoundError
from timeutils import local_now


logger = logging.getLogger(__name__)


class MedicineService:
    """
    Service for medicine-related operations
    """

    async def list_medicines(self, user_id: int, db: Session) -> List[models.Medicine]:
        """All medicines owned by a user"""
        return db.query(models.Medicine).filter(
            models.Medicine.user_id == user_id
        ).order_by(models.Medicine.id).all()

    async def get_medicine(
        self,
        user_id: int,
        medicine_id: int,
        db: Session
    ) -> models.Medicine:
        """
        Fetch one medicine

        Raises:
            NotFoundError: missing or owned by someone else
        """
        medicine = db.query(models.Medicine).filter(
            models.Medicine.id == medicine_id,
            models.Medicine.user_id == user_id
        ).first()

        if not medicine:
            raise NotFoundError("Medicine", medicine_id)
        return medicine

    async def create_medicine(
        self,
        user_id: int,
        data: Dict[str, Any],
        db: Session
    ) -> models.Medicine:
        """
        Add a medicine for a user

        Args:
            user_id: Owner
            data: Validated medicine fields
            db: Database session

        Returns:
            Created Medicine object
        """
        medicine = models.Medicine(user_id=user_id, **data)
        db.add(medicine)
        db.commit()
        db.refresh(medicine)

        logger.info("Added medicine %s for user %s", medicine.id, user_id)
        return medicine

    async def update_medicine(
        self,
        user_id: int,
        medicine_id: int,
        updates: Dict[str, Any],
        db: Session
    ) -> models.Medicine:
        """Apply a partial update"""
        medicine = await self.get_medicine(user_id, medicine_id, db)

        for field, value in updates.items():
            setattr(medicine, field, value)

        try:
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise
        db.refresh(medicine)

        logger.info("Updated medicine %s: %s", medicine_id, sorted(updates))
        return medicine

    async def delete_medicine(self, user_id: int, medicine_id: int, db: Session) -> int:
        """
        Delete a medicine and its dose logs

        Returns:
            Number of dose logs removed with it

        Raises:
            NotFoundError: nothing of the caller's matched the id
        """
        removed_logs = db.query(models.DoseLog).filter(
            models.DoseLog.medicine_id == medicine_id,
            models.DoseLog.user_id == user_id
        ).delete(synchronize_session=False)

        deleted = db.query(models.Medicine).filter(
            models.Medicine.id == medicine_id,
            models.Medicine.user_id == user_id
        ).delete(synchronize_session=False)

        if not deleted:
            db.rollback()
            raise NotFoundError("Medicine", medicine_id)

        db.commit()
        logger.info(
            "Deleted medicine %s for user %s with %d dose logs",
            medicine_id, user_id, removed_logs
        )
        return removed_logs

    async def snooze_medicine(
        self,
        user_id: int,
        medicine_id: int,
        minutes: int,
        db: Session
    ) -> datetime:
        """
        Suppress reminders for a medicine until now + minutes.
        Zero or negative minutes leave an already-expired snooze.
        """
        medicine = await self.get_medicine(user_id, medicine_id, db)

        medicine.snoozed_until = local_now() + timedelta(minutes=minutes)
        db.commit()
        db.refresh(medicine)

        logger.info("Medicine %s snoozed until %s", medicine_id, medicine.snoozed_until)
        return medicine.snoozed_until


medicine_service = MedicineService()
