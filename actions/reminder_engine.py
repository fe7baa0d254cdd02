"""
Reminder Engine
Client-side polling loop that fires medicine reminders at their reminder minute
"""

import asyncio
import logging
from collections import deque
from typing import Any, Callable, Deque, Dict, List, Optional, Sequence, Tuple
from dataclasses import dataclass, field
from datetime import datetime, timedelta

from config import settings
from models import ReminderSound
from timeutils import local_now, minute_key, to_local_naive
from tools.notification_service import (
    NotificationService,
    SoundPlayer,
    TerminalBellPlayer,
    build_reminder_notification,
    play_reminder_sound,
)


logger = logging.getLogger(__name__)


# (medicine_id, "YYYY-MM-DD", "HH:MM")
ReminderKey = Tuple[int, str, str]


def reminder_key(medicine_id: int, moment: datetime) -> ReminderKey:
    return (medicine_id, moment.date().isoformat(), minute_key(moment))


def format_key(key: ReminderKey) -> str:
    return "-".join(str(part) for part in key)


@dataclass
class ReminderAlert:
    """Entry in the recent-alerts history"""
    medicine_id: int
    name: str
    dosage: str
    time: str
    date: str
    fired_at: datetime


@dataclass(frozen=True)
class ReminderSnapshot:
    """
    Medicines and logs from the last completed refresh.
    Replaced as a whole; ticks never see a half-updated view.
    """
    medicines: Tuple[Any, ...] = ()
    logs: Tuple[Any, ...] = ()
    reminder_sound: str = ReminderSound.DEFAULT.value
    custom_sound_data: Optional[str] = None


class FiredReminderRegistry:
    """
    Reminder keys that have already fired, with the moment they fired.
    Entries older than the retention window are dropped by ``evict``.
    """

    def __init__(self, retention_hours: int = settings.REMINDER_KEY_RETENTION_HOURS):
        self.retention = timedelta(hours=retention_hours)
        self._fired: Dict[ReminderKey, datetime] = {}

    def __contains__(self, key: ReminderKey) -> bool:
        return key in self._fired

    def __len__(self) -> int:
        return len(self._fired)

    def record(self, key: ReminderKey, moment: datetime) -> None:
        self._fired[key] = moment

    def evict(self, now: datetime) -> int:
        cutoff = now - self.retention
        stale = [key for key, fired_at in self._fired.items() if fired_at < cutoff]
        for key in stale:
            del self._fired[key]
        return len(stale)


class ReminderEngine:
    """
    Compares the clock with each medicine's reminder time once per tick.

    A medicine fires when its reminder time equals the current minute, it has
    no log dated today, it is not snoozed into the future, and its
    (medicine, date, minute) key has not fired before. Ticks that miss a
    minute do not catch up.
    """

    def __init__(
        self,
        notification_service: Optional[NotificationService] = None,
        sound_player: Optional[SoundPlayer] = None,
        clock: Callable[[], datetime] = local_now,
        poll_seconds: float = settings.REMINDER_POLL_SECONDS,
        retention_hours: int = settings.REMINDER_KEY_RETENTION_HOURS,
        alerts_limit: int = settings.RECENT_ALERTS_LIMIT
    ):
        self.notification_service = notification_service or NotificationService()
        self.sound_player = sound_player or TerminalBellPlayer()
        self.clock = clock
        self.poll_seconds = poll_seconds

        self.fired = FiredReminderRegistry(retention_hours)
        self._snapshot = ReminderSnapshot()
        self._recent_alerts: Deque[ReminderAlert] = deque(maxlen=alerts_limit)
        self._active_reminder: Optional[Any] = None
        self._stop_event: Optional[asyncio.Event] = None

    # ==================== STATE ====================

    @property
    def snapshot(self) -> ReminderSnapshot:
        return self._snapshot

    def update_snapshot(
        self,
        medicines: Sequence[Any],
        logs: Sequence[Any],
        reminder_sound: Optional[str] = None,
        custom_sound_data: Optional[str] = None
    ) -> None:
        """Swap in the result of a completed refresh"""
        self._snapshot = ReminderSnapshot(
            medicines=tuple(medicines),
            logs=tuple(logs),
            reminder_sound=reminder_sound or ReminderSound.DEFAULT.value,
            custom_sound_data=custom_sound_data,
        )

    @property
    def active_reminder(self) -> Optional[Any]:
        """Medicine awaiting a log or snooze from the user"""
        return self._active_reminder

    def dismiss(self) -> None:
        """Close the active reminder; its key stays fired"""
        self._active_reminder = None

    @property
    def recent_alerts(self) -> List[ReminderAlert]:
        """Most recent first"""
        return list(self._recent_alerts)

    # ==================== EVALUATION ====================

    def is_due(self, medicine: Any, now: datetime, logs: Sequence[Any]) -> bool:
        if not medicine.reminder_time:
            return False

        today = now.date()
        if any(
            log.medicine_id == medicine.id and to_local_naive(log.taken_at).date() == today
            for log in logs
        ):
            return False

        snoozed_until = to_local_naive(medicine.snoozed_until)
        if snoozed_until is not None and snoozed_until > now:
            return False

        if medicine.reminder_time != minute_key(now):
            return False

        return reminder_key(medicine.id, now) not in self.fired

    def due_medicines(self, now: datetime) -> List[Any]:
        snapshot = self._snapshot
        return [m for m in snapshot.medicines if self.is_due(m, now, snapshot.logs)]

    async def tick(self, now: Optional[datetime] = None) -> List[Any]:
        """
        Run one evaluation pass

        Returns:
            Medicines that fired on this tick
        """
        now = now or self.clock()
        evicted = self.fired.evict(now)
        if evicted:
            logger.debug("Evicted %d fired reminder keys", evicted)

        snapshot = self._snapshot
        fired = []
        for medicine in self.due_medicines(now):
            await self._fire(medicine, now, snapshot)
            fired.append(medicine)
        return fired

    async def _fire(self, medicine: Any, now: datetime, snapshot: ReminderSnapshot) -> None:
        key = reminder_key(medicine.id, now)
        self.fired.record(key, now)
        logger.info("Reminder for %s (%s) at %s", medicine.name, medicine.id, key[2])

        try:
            play_reminder_sound(
                self.sound_player,
                snapshot.reminder_sound,
                snapshot.custom_sound_data
            )
        except Exception as e:
            logger.error(f"Reminder sound failed: {e}")

        self._recent_alerts.appendleft(ReminderAlert(
            medicine_id=medicine.id,
            name=medicine.name,
            dosage=medicine.dosage,
            time=key[2],
            date=key[1],
            fired_at=now,
        ))

        try:
            await self.notification_service.send(
                build_reminder_notification(medicine, format_key(key))
            )
        except Exception as e:
            logger.error(f"Reminder notification failed: {e}")

        self._active_reminder = medicine

    # ==================== LOOP ====================

    @property
    def running(self) -> bool:
        return self._stop_event is not None and not self._stop_event.is_set()

    async def run(self) -> None:
        """Tick every ``poll_seconds`` until ``stop`` is called"""
        self._stop_event = asyncio.Event()
        logger.info("Reminder engine started (every %ss)", self.poll_seconds)

        while not self._stop_event.is_set():
            await self.tick()
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self.poll_seconds)
            except asyncio.TimeoutError:
                pass

        logger.info("Reminder engine stopped")

    def stop(self) -> None:
        if self._stop_event is not None:
            self._stop_event.set()
