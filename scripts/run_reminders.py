#!/usr/bin/env python
"""
Run Reminders
Log in to a MedTrack server and fire medicine reminders in the terminal
"""

import sys
import os
import argparse
import asyncio
import logging

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config import settings
from actions.reminder_engine import ReminderEngine
from client.api_client import MedTrackClient
from client.dashboard import DashboardSession
from client.errors import ClientError
from tools.notification_service import (
    ConsoleNotifier,
    NotificationChannel,
    NotificationService,
    TerminalBellPlayer,
)


logger = logging.getLogger(__name__)


async def run(args) -> int:
    notifications = NotificationService()
    notifications.register_handler(NotificationChannel.CONSOLE, ConsoleNotifier())
    engine = ReminderEngine(
        notification_service=notifications,
        sound_player=TerminalBellPlayer(),
        poll_seconds=args.poll_seconds
    )

    async with MedTrackClient(args.base_url) as client:
        try:
            auth = await client.login(args.email, args.password)
        except ClientError as e:
            logger.error(f"Login failed: {e.message}")
            return 1

        print(f"Signed in as {auth.user.name}. Watching reminders (Ctrl+C to stop).")
        session = DashboardSession(client, engine)
        await session.run(refresh_seconds=args.refresh_seconds)
    return 0


def main():
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format=settings.LOG_FORMAT
    )

    parser = argparse.ArgumentParser(
        description="Poll a MedTrack server and ring reminders in the terminal"
    )
    parser.add_argument("--base-url", default=settings.API_BASE_URL, help="Server base URL")
    parser.add_argument("--email", required=True, help="Account email")
    parser.add_argument("--password", required=True, help="Account password")
    parser.add_argument(
        "--poll-seconds",
        type=float,
        default=settings.REMINDER_POLL_SECONDS,
        help="Seconds between reminder checks"
    )
    parser.add_argument(
        "--refresh-seconds",
        type=float,
        default=60.0,
        help="Seconds between data refreshes"
    )

    args = parser.parse_args()

    try:
        sys.exit(asyncio.run(run(args)))
    except KeyboardInterrupt:
        print("\nStopped.")


if __name__ == "__main__":
    main()
