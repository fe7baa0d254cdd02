"""
Scripts for MedTrack
Utility scripts for seeding and running reminders
"""

from .seed_data import seed_demo_user, seed_all

__all__ = [
    "seed_demo_user",
    "seed_all"
]
