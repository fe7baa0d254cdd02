"""
Actions Module
Client-side reminder engine
"""

from .reminder_engine import (
    ReminderAlert,
    ReminderEngine,
    ReminderSnapshot,
    FiredReminderRegistry,
    reminder_key,
)


__all__ = [
    "ReminderAlert",
    "ReminderEngine",
    "ReminderSnapshot",
    "FiredReminderRegistry",
    "reminder_key",
]
