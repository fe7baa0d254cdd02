"""
Tools Package
Utility tools for the MedTrack client
"""

from .notification_service import (
    NotificationService,
    NotificationChannel,
    NotificationResult,
    ReminderNotification,
    ConsoleNotifier,
    build_reminder_notification,
    SoundPlayer,
    TerminalBellPlayer,
    ToneSpec,
    ToneStep,
    TONES,
    decode_data_url,
    play_reminder_sound,
)

__all__ = [
    # Notifications
    "NotificationService",
    "NotificationChannel",
    "NotificationResult",
    "ReminderNotification",
    "ConsoleNotifier",
    "build_reminder_notification",

    # Sounds
    "SoundPlayer",
    "TerminalBellPlayer",
    "ToneSpec",
    "ToneStep",
    "TONES",
    "decode_data_url",
    "play_reminder_sound",
]
