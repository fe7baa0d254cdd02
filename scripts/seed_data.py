#!/usr/bin/env python
"""
Seed Data
Script to seed the database with a demo account for development and testing
"""

import sys
import os
import argparse
import logging
from datetime import timedelta
from typing import List

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import drop_db, get_db_context, init_db
from models import User, Medicine, DoseLog, DoseStatus
from services.auth_service import hash_password
from timeutils import local_now


logger = logging.getLogger(__name__)

DEMO_EMAIL = "demo@example.com"
DEMO_PASSWORD = "password123"
DEMO_NAME = "Demo User"
HISTORY_DAYS = 7

DEMO_MEDICINES = [
    {
        "name": "Lisinopril",
        "dosage": "10mg",
        "frequency": "Daily",
        "time_of_day": "Morning",
        "instructions": "Take with water",
        "reminder_time": "08:00",
    },
    {
        "name": "Metformin",
        "dosage": "500mg",
        "frequency": "Twice a day",
        "time_of_day": "Morning, Evening",
        "instructions": "Take with food",
        "reminder_time": "19:00",
    },
    {
        "name": "Atorvastatin",
        "dosage": "20mg",
        "frequency": "Daily",
        "time_of_day": "Night",
        "instructions": "Avoid grapefruit juice",
        "reminder_time": "21:00",
    },
]


def seed_demo_user(db) -> User:
    """
    Create the demo user with three medicines and a week of taken doses.
    Does nothing when the demo user already exists.
    """
    existing = db.query(User).filter(User.email == DEMO_EMAIL).first()
    if existing:
        logger.info("Demo user already exists, skipping seed")
        return existing

    logger.info("Creating demo user...")
    user = User(
        email=DEMO_EMAIL,
        password_hash=hash_password(DEMO_PASSWORD),
        name=DEMO_NAME,
    )
    db.add(user)
    db.flush()

    now = local_now()
    medicines: List[Medicine] = []
    for data in DEMO_MEDICINES:
        medicine = Medicine(user_id=user.id, start_date=now.date(), **data)
        db.add(medicine)
        db.flush()
        medicines.append(medicine)

        for days_ago in range(HISTORY_DAYS):
            db.add(DoseLog(
                user_id=user.id,
                medicine_id=medicine.id,
                taken_at=now - timedelta(days=days_ago),
                status=DoseStatus.TAKEN.value,
            ))

    db.commit()
    logger.info(
        "Seeded demo user %s with %d medicines and %d dose logs",
        user.id, len(medicines), len(medicines) * HISTORY_DAYS
    )
    return user


def seed_all(clear_existing: bool = False):
    """Seed all data"""
    if clear_existing:
        drop_db()

    init_db()

    try:
        with get_db_context() as db:
            user = seed_demo_user(db)

            print("\n" + "="*60)
            print("Seeding Complete!")
            print("="*60)
            print(f"\nDatabase Statistics:")
            print(f"  Users: {db.query(User).count()}")
            print(f"  Medicines: {db.query(Medicine).count()}")
            print(f"  Dose Logs: {db.query(DoseLog).count()}")
            print(f"\nDemo login: {user.email} / {DEMO_PASSWORD}")
    except Exception as e:
        logger.error(f"Error during seeding: {e}")
        raise


def main():
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(
        description="Seed the database with a demo account"
    )
    parser.add_argument(
        "--clear",
        action="store_true",
        help="Drop existing tables before seeding"
    )

    args = parser.parse_args()

    seed_all(clear_existing=args.clear)


if __name__ == "__main__":
    main()
