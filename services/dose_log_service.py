"""
Dose Log Service
Append-only dose logging and log queries
"""

import logging
from typing import List, Optional, Tuple
from datetime import datetime
from sqlalchemy.orm import Session

import models
from models import DoseStatus
from services.exceptions import NotFoundError
from timeutils import local_now, to_local_naive


logger = logging.getLogger(__name__)

UNKNOWN_MEDICINE_NAME = "Unknown"


class DoseLogService:
    """
    Service for dose logging
    """

    async def log_dose(
        self,
        user_id: int,
        medicine_id: int,
        taken_at: Optional[datetime] = None,
        status: DoseStatus = DoseStatus.TAKEN,
        *,
        db: Session
    ) -> models.DoseLog:
        """
        Record a dose for one of the user's medicines.

        Writes are not deduplicated: posting the same dose twice stores two logs.

        Raises:
            NotFoundError: medicine is missing or belongs to another user
        """
        medicine = db.query(models.Medicine).filter(
            models.Medicine.id == medicine_id,
            models.Medicine.user_id == user_id
        ).first()
        if not medicine:
            raise NotFoundError("Medicine", medicine_id)

        log = models.DoseLog(
            user_id=user_id,
            medicine_id=medicine_id,
            taken_at=to_local_naive(taken_at) or local_now(),
            status=DoseStatus(status).value,
        )
        db.add(log)
        db.commit()
        db.refresh(log)

        logger.info(
            "Logged dose for user %s, medicine %s: %s",
            user_id, medicine_id, log.status
        )
        return log

    async def list_logs_with_names(
        self,
        user_id: int,
        db: Session
    ) -> List[Tuple[models.DoseLog, str]]:
        """Logs newest first, each paired with its medicine name"""
        rows = db.query(models.DoseLog, models.Medicine.name).outerjoin(
            models.Medicine,
            (models.Medicine.id == models.DoseLog.medicine_id)
            & (models.Medicine.user_id == user_id)
        ).filter(
            models.DoseLog.user_id == user_id
        ).order_by(
            models.DoseLog.taken_at.desc(),
            models.DoseLog.id.desc()
        ).all()

        return [(log, name or UNKNOWN_MEDICINE_NAME) for log, name in rows]

    async def get_logs(
        self,
        user_id: int,
        since: Optional[datetime] = None,
        *,
        db: Session
    ) -> List[models.DoseLog]:
        """Logs in insertion order, optionally from a start time"""
        query = db.query(models.DoseLog).filter(models.DoseLog.user_id == user_id)
        if since is not None:
            query = query.filter(models.DoseLog.taken_at >= since)
        return query.order_by(models.DoseLog.id).all()


dose_log_service = DoseLogService()
