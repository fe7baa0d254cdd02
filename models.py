"""
Database Models
SQLAlchemy ORM models for MedTrack
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, Date, Index
from sqlalchemy.orm import relationship
from enum import Enum as PyEnum

from database import Base
from config import TableNames
from timeutils import local_now


# ==================== ENUMS ====================

class DoseStatus(str, PyEnum):
    """Status recorded on a dose log"""
    TAKEN = "taken"
    MISSED = "missed"
    SKIPPED = "skipped"


class ReminderSound(str, PyEnum):
    """Reminder tone preference"""
    DEFAULT = "default"
    CHIME = "chime"
    PULSE = "pulse"
    CUSTOM = "custom"


# ==================== MODELS ====================

class User(Base):
    """Account with reminder and language preferences"""
    __tablename__ = TableNames.USERS

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    name = Column(String(255), nullable=False)

    # Preferences
    reminder_sound = Column(String(20), default=ReminderSound.DEFAULT.value, nullable=False)
    custom_sound_data = Column(Text)  # data: URL of an uploaded tone
    language = Column(String(20), default="en", nullable=False)

    created_at = Column(DateTime, default=local_now)

    # Relationships
    medicines = relationship("Medicine", back_populates="user", cascade="all, delete-orphan")
    dose_logs = relationship("DoseLog", back_populates="user", cascade="all, delete-orphan")


class Medicine(Base):
    """Medicine with a single daily reminder time"""
    __tablename__ = TableNames.MEDICINES

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey(f"{TableNames.USERS}.id"), nullable=False)

    name = Column(String(255), nullable=False)
    dosage = Column(String(100), nullable=False)
    frequency = Column(String(100), nullable=False)
    time_of_day = Column(String(100))  # free text, e.g. "Morning, Evening"
    instructions = Column(Text)

    start_date = Column(Date)
    end_date = Column(Date)

    reminder_time = Column(String(5))  # "HH:MM"
    snoozed_until = Column(DateTime)

    created_at = Column(DateTime, default=local_now)
    updated_at = Column(DateTime, default=local_now, onupdate=local_now)

    # Relationships
    user = relationship("User", back_populates="medicines")
    dose_logs = relationship("DoseLog", back_populates="medicine", cascade="all, delete-orphan")

    __table_args__ = (
        Index("ix_medicines_user", "user_id"),
    )


class DoseLog(Base):
    """Record that a medicine was actioned at a specific time"""
    __tablename__ = TableNames.DOSE_LOGS

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey(f"{TableNames.USERS}.id"), nullable=False)
    medicine_id = Column(Integer, ForeignKey(f"{TableNames.MEDICINES}.id"), nullable=False)

    taken_at = Column(DateTime, nullable=False, default=local_now)
    status = Column(String(20), nullable=False, default=DoseStatus.TAKEN.value)

    # Relationships
    user = relationship("User", back_populates="dose_logs")
    medicine = relationship("Medicine", back_populates="dose_logs")

    __table_args__ = (
        Index("ix_dose_logs_user_taken", "user_id", "taken_at"),
        Index("ix_dose_logs_medicine", "medicine_id"),
    )
