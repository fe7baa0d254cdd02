"""
Time helpers
All persisted timestamps are naive wall-clock times in settings.TIMEZONE
"""

from datetime import datetime, time
from typing import Optional
from zoneinfo import ZoneInfo

from config import settings


def local_now() -> datetime:
    """Current wall-clock time in the configured zone, without tzinfo"""
    return datetime.now(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def to_local_naive(value: Optional[datetime]) -> Optional[datetime]:
    """Convert an aware datetime into the configured zone; naive values pass through"""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(ZoneInfo(settings.TIMEZONE)).replace(tzinfo=None)


def parse_reminder_time(value: str) -> time:
    """Parse an HH:MM reminder time"""
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


def minute_key(moment: datetime) -> str:
    """HH:MM string used to match reminder times"""
    return moment.strftime("%H:%M")


def weekday_index(moment: datetime) -> int:
    """Weekday with 0=Sunday .. 6=Saturday"""
    return (moment.weekday() + 1) % 7
