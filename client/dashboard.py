"""
Dashboard Session
Client-side state: concurrent refresh, reminder snapshot, user actions and toasts
"""

import asyncio
import logging
from collections import deque
from typing import Any, Deque, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from pydantic import ValidationError

from config import settings
from actions.reminder_engine import ReminderEngine
from api.schemas.analytics import BehaviorAnalysisResponse, DailyStatResponse
from api.schemas.dose_log import DoseLogWithName
from api.schemas.medicine import MedicineCreate, MedicineResponse
from api.schemas.user import UserResponse
from client.api_client import MedTrackClient
from client.errors import (
    AuthenticationError,
    BackendUnavailableError,
    ClientError,
)
from services.analytics_service import rank_medicines_by_taken, summarize_series
from timeutils import local_now
from tools.notification_service import NotificationChannel, ReminderNotification


logger = logging.getLogger(__name__)

TOAST_LIMIT = 5


@dataclass
class Toast:
    """Short user-facing message"""
    message: str
    kind: str = "info"  # info, success, error
    created_at: datetime = field(default_factory=local_now)


@dataclass(frozen=True)
class DashboardState:
    """Everything one refresh fetched, plus the summary derived from it"""
    medicines: Tuple[MedicineResponse, ...]
    logs: Tuple[DoseLogWithName, ...]
    daily_series: Tuple[DailyStatResponse, ...]
    user: UserResponse
    behavior: BehaviorAnalysisResponse
    summary: Dict[str, Any]
    medicine_ranking: List[Dict[str, Any]]
    refreshed_at: datetime


class DashboardSession:
    """
    Holds the last good dashboard state and feeds it to the reminder engine.

    Errors never escape the user-facing operations: a 503 sets
    ``connectivity_error`` (a persistent banner), an auth failure sets
    ``session_expired``, anything else becomes an error toast.
    """

    def __init__(self, client: MedTrackClient, engine: Optional[ReminderEngine] = None):
        self.client = client
        self.engine = engine or ReminderEngine()
        self.engine.notification_service.register_handler(
            NotificationChannel.IN_APP, self._toast_notification
        )

        self.state: Optional[DashboardState] = None
        self.connectivity_error: Optional[str] = None
        self.session_expired = False
        self.toasts: Deque[Toast] = deque(maxlen=TOAST_LIMIT)
        self._stop_event: Optional[asyncio.Event] = None

    # ==================== TOASTS ====================

    def add_toast(self, message: str, kind: str = "info") -> None:
        self.toasts.appendleft(Toast(message=message, kind=kind))

    def _toast_notification(self, notification: ReminderNotification) -> None:
        self.add_toast(notification.title, "info")

    def _report(self, error: ClientError) -> None:
        if isinstance(error, BackendUnavailableError):
            self.connectivity_error = error.message
        elif isinstance(error, AuthenticationError):
            self.session_expired = True
            self.add_toast("Your session has expired. Please log in again.", "error")
        else:
            self.add_toast(error.message, "error")

    # ==================== REFRESH ====================

    async def refresh(self) -> bool:
        """
        Fetch medicines, logs, analytics, profile and behavior concurrently

        Returns:
            True when a new state was swapped in; prior state is kept otherwise
        """
        results = await asyncio.gather(
            self.client.list_medicines(),
            self.client.list_logs(),
            self.client.analytics(),
            self.client.me(),
            self.client.behavior_analysis(),
            return_exceptions=True
        )

        errors = [r for r in results if isinstance(r, BaseException)]
        for error in errors:
            if not isinstance(error, ClientError):
                raise error
        if errors:
            unavailable = [e for e in errors if isinstance(e, BackendUnavailableError)]
            self._report(unavailable[0] if unavailable else errors[0])
            logger.warning("Refresh failed: %s", errors[0])
            return False

        medicines, logs, series, user, behavior = results
        self.connectivity_error = None
        self.state = DashboardState(
            medicines=tuple(medicines),
            logs=tuple(logs),
            daily_series=tuple(series),
            user=user,
            behavior=behavior,
            summary=summarize_series(series),
            medicine_ranking=rank_medicines_by_taken(medicines, logs),
            refreshed_at=local_now(),
        )
        self.engine.update_snapshot(
            medicines,
            logs,
            reminder_sound=user.reminder_sound,
            custom_sound_data=user.custom_sound_data
        )
        return True

    # ==================== ACTIONS ====================

    async def log_active_reminder(self) -> bool:
        """Log the active reminder's medicine as taken now"""
        medicine = self.engine.active_reminder
        if medicine is None:
            return False

        try:
            await self.client.log_dose(medicine.id)
        except ClientError as e:
            self._report(e)
            return False

        self.engine.dismiss()
        self.add_toast(f"Logged {medicine.name}", "success")
        await self.refresh()
        return True

    async def snooze_active_reminder(self, minutes: int = settings.DEFAULT_SNOOZE_MINUTES) -> bool:
        """Postpone the active reminder's medicine"""
        medicine = self.engine.active_reminder
        if medicine is None:
            return False

        try:
            await self.client.snooze_medicine(medicine.id, minutes)
        except ClientError as e:
            self._report(e)
            return False

        self.engine.dismiss()
        self.add_toast(f"Snoozed {medicine.name} for {minutes} minutes", "info")
        await self.refresh()
        return True

    async def add_medicine_from_text(
        self,
        text: str,
        reminder_time: Optional[str] = None
    ) -> Optional[MedicineResponse]:
        """
        Parse free text with the assistant, then create the medicine.
        Starts today; ends after ``duration_days`` when the text gave one.
        Nothing is created when parsing fails.
        """
        try:
            parsed = await self.client.parse_medicine(text)
        except ClientError as e:
            self._report(e)
            return None

        today = local_now().date()
        try:
            medicine = MedicineCreate(
                name=parsed.name,
                dosage=parsed.dosage,
                frequency=parsed.frequency,
                time_of_day=parsed.time_of_day or None,
                instructions=parsed.instructions or None,
                start_date=today,
                end_date=today + timedelta(days=parsed.duration_days) if parsed.duration_days else None,
                reminder_time=reminder_time,
            )
        except ValidationError as e:
            logger.warning("Parsed medicine rejected: %s", e)
            self.add_toast("Could not use the parsed medicine. Please add it manually.", "error")
            return None

        try:
            created = await self.client.create_medicine(medicine)
        except ClientError as e:
            self._report(e)
            return None

        self.add_toast(f"Added {created.name}", "success")
        await self.refresh()
        return created

    # ==================== LOOP ====================

    async def run(self, refresh_seconds: float = 60.0) -> None:
        """Refresh periodically while the reminder engine ticks"""
        self._stop_event = asyncio.Event()
        await self.refresh()
        engine_task = asyncio.create_task(self.engine.run())

        try:
            while not self._stop_event.is_set():
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=refresh_seconds)
                except asyncio.TimeoutError:
                    await self.refresh()
        finally:
            self.engine.stop()
            await engine_task

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
