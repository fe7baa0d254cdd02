"""
Notification Service Tool
Reminder tones and platform notifications for due medicines
"""

import asyncio
import base64
import binascii
import inspect
import logging
import sys
from typing import Any, Callable, Dict, List, Optional, TextIO, Tuple
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from models import ReminderSound
from timeutils import local_now


logger = logging.getLogger(__name__)


# ==================== SOUNDS ====================

@dataclass(frozen=True)
class ToneStep:
    """One segment of a tone: frequency in Hz held (or ramped) from ``at`` seconds"""
    frequency: float
    at: float = 0.0
    ramp: bool = False


@dataclass(frozen=True)
class ToneSpec:
    """Synthesized reminder tone"""
    waveform: str
    steps: Tuple[ToneStep, ...]
    duration: float = 0.5
    gain: float = 0.1


TONES: Dict[str, ToneSpec] = {
    ReminderSound.DEFAULT.value: ToneSpec(
        waveform="triangle",
        steps=(ToneStep(523.25),),  # C5
    ),
    ReminderSound.CHIME.value: ToneSpec(
        waveform="sine",
        steps=(ToneStep(880.0), ToneStep(440.0, at=0.5, ramp=True)),
    ),
    ReminderSound.PULSE.value: ToneSpec(
        waveform="square",
        steps=(ToneStep(440.0), ToneStep(660.0, at=0.1), ToneStep(440.0, at=0.2)),
    ),
}


def decode_data_url(data_url: str) -> Tuple[str, bytes]:
    """
    Split a ``data:<mime>;base64,<payload>`` URL

    Raises:
        ValueError: not a base64 data URL
    """
    if not data_url or not data_url.startswith("data:") or "," not in data_url:
        raise ValueError("Custom sound is not a data URL")

    header, payload = data_url[5:].split(",", 1)
    mime, _, encoding = header.partition(";")
    if encoding != "base64":
        raise ValueError("Custom sound must be base64 encoded")
    try:
        return mime or "application/octet-stream", base64.b64decode(payload, validate=True)
    except binascii.Error as e:
        raise ValueError(f"Custom sound payload is not valid base64: {e}") from e


class SoundPlayer:
    """
    Plays reminder tones. Subclasses provide the output device.
    """

    def play_tone(self, tone: ToneSpec) -> None:
        raise NotImplementedError

    def play_custom(self, mime: str, audio: bytes) -> None:
        raise NotImplementedError


class TerminalBellPlayer(SoundPlayer):
    """Rings the terminal bell; one ring per tone step"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def play_tone(self, tone: ToneSpec) -> None:
        self.stream.write("\a" * len(tone.steps))
        self.stream.flush()

    def play_custom(self, mime: str, audio: bytes) -> None:
        logger.debug("Custom tone (%s, %d bytes) rendered as a bell", mime, len(audio))
        self.stream.write("\a")
        self.stream.flush()


def play_reminder_sound(
    player: SoundPlayer,
    sound: Optional[str],
    custom_sound_data: Optional[str] = None
) -> None:
    """
    Play the user's reminder sound.
    ``custom`` without a payload, and unknown names, fall back to the default tone.
    """
    if sound == ReminderSound.CUSTOM.value and custom_sound_data:
        mime, audio = decode_data_url(custom_sound_data)
        player.play_custom(mime, audio)
        return

    player.play_tone(TONES.get(sound or "", TONES[ReminderSound.DEFAULT.value]))


# ==================== NOTIFICATIONS ====================

class NotificationChannel(str, Enum):
    """Available notification channels"""
    CONSOLE = "console"
    IN_APP = "in_app"


@dataclass
class ReminderNotification:
    """Platform notification for one reminder firing"""
    title: str
    body: str
    tag: str
    medicine_id: Optional[int] = None
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class NotificationResult:
    """Result of sending a notification"""
    success: bool
    channel: NotificationChannel
    delivered_at: Optional[datetime] = None
    error: Optional[str] = None


NotificationHandler = Callable[[ReminderNotification], Any]


def build_reminder_notification(medicine: Any, tag: str) -> ReminderNotification:
    """Title and body shown when a medicine is due"""
    body = f"Dosage: {medicine.dosage}. {medicine.instructions or ''}".strip()
    return ReminderNotification(
        title=f"Time for your {medicine.name}",
        body=body,
        tag=tag,
        medicine_id=medicine.id,
    )


class NotificationService:
    """
    Fans a notification out to registered channel handlers.
    Handlers may be plain or async callables; a failing handler is logged and
    reported in the results without affecting the others.
    """

    def __init__(self):
        self._handlers: Dict[NotificationChannel, List[NotificationHandler]] = {}

    def register_handler(self, channel: NotificationChannel, handler: NotificationHandler) -> None:
        self._handlers.setdefault(NotificationChannel(channel), []).append(handler)

    def clear_handlers(self) -> None:
        self._handlers.clear()

    @property
    def channels(self) -> List[NotificationChannel]:
        return list(self._handlers)

    async def send(self, notification: ReminderNotification) -> List[NotificationResult]:
        """
        Deliver through every registered handler

        Returns:
            One result per handler attempted
        """
        results = []
        for channel, handlers in self._handlers.items():
            for handler in handlers:
                try:
                    outcome = handler(notification)
                    if inspect.isawaitable(outcome):
                        await outcome
                    results.append(NotificationResult(
                        success=True,
                        channel=channel,
                        delivered_at=local_now()
                    ))
                except asyncio.CancelledError:
                    raise
                except Exception as e:
                    logger.error(f"Error sending {channel.value} notification: {e}")
                    results.append(NotificationResult(
                        success=False,
                        channel=channel,
                        error=str(e)
                    ))

        if not results:
            logger.debug("No notification handlers registered for %s", notification.tag)
        return results


class ConsoleNotifier:
    """Prints notifications to a text stream"""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stdout

    def __call__(self, notification: ReminderNotification) -> None:
        self.stream.write(f"[{local_now():%H:%M}] {notification.title}\n    {notification.body}\n")
        self.stream.flush()
