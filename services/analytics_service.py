"""
Analytics Service
Adherence aggregates derived from dose logs and medicines

The module-level functions are pure and operate on any objects exposing the
same attribute names as the ORM models (``taken_at``, ``status``,
``medicine_id`` on logs; ``id``, ``name``, ``reminder_time`` on medicines),
so the client library reuses them on API response models.
"""

import logging
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta
from typing import Any, Dict, Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session

from config import analytics_config
from models import DoseStatus
from services.dose_log_service import dose_log_service
from services.medicine_service import medicine_service
from timeutils import local_now, parse_reminder_time, weekday_index


logger = logging.getLogger(__name__)


@dataclass
class DailyStat:
    """Doses logged on one calendar date"""
    date: str
    total: int = 0
    taken: int = 0


@dataclass
class WeekdayStat:
    """Doses logged on one weekday (0=Sunday)"""
    day_index: int
    total: int = 0
    taken: int = 0


@dataclass
class MedicineStat:
    medicine_id: int
    name: str
    total: int = 0
    taken: int = 0


@dataclass
class DelaySample:
    """Minutes between the reminder time and the dose (negative when early)"""
    medicine_id: int
    name: str
    delay: float


def _is_taken(log) -> bool:
    return log.status == DoseStatus.TAKEN.value


# ==================== AGGREGATES ====================

def daily_completion_series(
    logs: Iterable[Any],
    limit: int = analytics_config.DAILY_SERIES_LIMIT
) -> List[DailyStat]:
    """Per-date totals, ascending by date, keeping the most recent ``limit``"""
    by_date: Dict[str, DailyStat] = {}
    for log in logs:
        key = log.taken_at.date().isoformat()
        stat = by_date.setdefault(key, DailyStat(date=key))
        stat.total += 1
        if _is_taken(log):
            stat.taken += 1

    series = sorted(by_date.values(), key=lambda s: s.date)
    return series[-limit:] if limit else series


def day_of_week_adherence(logs: Iterable[Any]) -> List[WeekdayStat]:
    """Per-weekday totals in first-seen order"""
    by_day: Dict[int, WeekdayStat] = {}
    for log in logs:
        index = weekday_index(log.taken_at)
        stat = by_day.setdefault(index, WeekdayStat(day_index=index))
        stat.total += 1
        if _is_taken(log):
            stat.taken += 1
    return list(by_day.values())


def medicine_adherence(medicines: Iterable[Any], logs: Sequence[Any]) -> List[MedicineStat]:
    """Totals for every medicine, including ones never logged"""
    stats = []
    for medicine in medicines:
        med_logs = [log for log in logs if log.medicine_id == medicine.id]
        stats.append(MedicineStat(
            medicine_id=medicine.id,
            name=medicine.name,
            total=len(med_logs),
            taken=sum(1 for log in med_logs if _is_taken(log)),
        ))
    return stats


def compute_delay_minutes(taken_at: datetime, reminder_time: str) -> float:
    """Minutes from the same-day reminder time to ``taken_at``"""
    scheduled = datetime.combine(taken_at.date(), parse_reminder_time(reminder_time))
    return (taken_at.replace(tzinfo=None) - scheduled).total_seconds() / 60


def delay_samples(
    medicines: Iterable[Any],
    logs: Iterable[Any],
    limit: int = analytics_config.DELAY_SAMPLES_LIMIT
) -> List[DelaySample]:
    """Delay of every taken dose whose medicine has a reminder time, last ``limit``"""
    by_id = {medicine.id: medicine for medicine in medicines}
    samples = []
    for log in logs:
        if not _is_taken(log):
            continue
        medicine = by_id.get(log.medicine_id)
        if medicine is None or not medicine.reminder_time:
            continue
        samples.append(DelaySample(
            medicine_id=medicine.id,
            name=medicine.name,
            delay=compute_delay_minutes(log.taken_at, medicine.reminder_time),
        ))
    return samples[-limit:] if limit else samples


# ==================== SUMMARY ====================

def adherence_streak(series: Sequence[Any]) -> int:
    """
    Consecutive fully adherent days, newest first.
    Days with nothing logged are skipped; the first day with doses that were
    not all taken ends the streak.
    """
    streak = 0
    for day in sorted(series, key=lambda d: d.date, reverse=True):
        if day.total > 0 and day.taken == day.total:
            streak += 1
        elif day.total > 0:
            break
    return streak


def missed_in_last_days(
    series: Sequence[Any],
    days: int = analytics_config.MISSED_WINDOW_DAYS
) -> int:
    """Doses not taken across the last ``days`` entries of the series"""
    return sum(day.total - day.taken for day in list(series)[-days:])


def best_weekday(series: Sequence[Any]) -> str:
    """Weekday name with the highest taken/total ratio; ties go to the first seen"""
    by_day: Dict[str, List[int]] = {}
    for day in series:
        name = analytics_config.WEEKDAY_NAMES[weekday_index(datetime.fromisoformat(day.date))]
        counts = by_day.setdefault(name, [0, 0])
        counts[0] += day.total
        counts[1] += day.taken

    best, best_rate = "N/A", -1.0
    for name, (total, taken) in by_day.items():
        rate = taken / total if total > 0 else 0.0
        if rate > best_rate:
            best, best_rate = name, rate
    return best


def summarize_series(series: Sequence[Any]) -> Dict[str, Any]:
    if not series:
        return {"streak": 0, "missed_last_7": 0, "best_day": "N/A"}
    return {
        "streak": adherence_streak(series),
        "missed_last_7": missed_in_last_days(series),
        "best_day": best_weekday(series),
    }


def rank_medicines_by_taken(medicines: Iterable[Any], logs: Sequence[Any]) -> List[Dict[str, Any]]:
    """Taken-dose count per medicine, most taken first"""
    ranking = [
        {"name": stat.name, "taken": stat.taken}
        for stat in medicine_adherence(medicines, logs)
    ]
    return sorted(ranking, key=lambda r: r["taken"], reverse=True)


# ==================== SERVICE ====================

class AnalyticsService:
    """
    Service computing analytics views for a user
    """

    def _window_start(self, days: Optional[int]) -> Optional[datetime]:
        if not days:
            return None
        today = local_now().replace(hour=0, minute=0, second=0, microsecond=0)
        return today - timedelta(days=days - 1)

    async def get_daily_series(
        self,
        user_id: int,
        days: Optional[int] = None,
        *,
        db: Session
    ) -> List[DailyStat]:
        logs = await dose_log_service.get_logs(user_id, since=self._window_start(days), db=db)
        return daily_completion_series(logs)

    async def get_summary(
        self,
        user_id: int,
        days: Optional[int] = None,
        *,
        db: Session
    ) -> Dict[str, Any]:
        series = await self.get_daily_series(user_id, days, db=db)
        return summarize_series(series)

    async def get_behavior_analysis(
        self,
        user_id: int,
        days: Optional[int] = None,
        *,
        db: Session
    ) -> Dict[str, Any]:
        """
        Day-of-week, per-medicine and delay views

        Args:
            user_id: Owner
            days: Optional window ending today
            db: Database session

        Returns:
            Dict with ``day_of_week_stats``, ``medicine_stats`` and ``delays``
        """
        logs = await dose_log_service.get_logs(user_id, since=self._window_start(days), db=db)
        medicines = await medicine_service.list_medicines(user_id, db)

        analysis = {
            "day_of_week_stats": [asdict(s) for s in day_of_week_adherence(logs)],
            "medicine_stats": [asdict(s) for s in medicine_adherence(medicines, logs)],
            "delays": [asdict(s) for s in delay_samples(medicines, logs)],
        }
        logger.debug(
            "Behavior analysis for user %s: %d logs, %d medicines",
            user_id, len(logs), len(medicines)
        )
        return analysis


analytics_service = AnalyticsService()
