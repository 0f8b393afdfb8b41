"""Habit and HabitLog models"""

from sqlalchemy import Column, Integer, String, DateTime, Date, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from datetime import datetime
from habitflow.core.database import Base

HABIT_FREQUENCIES = ("daily", "weekly", "custom")
LOG_STATUSES = ("completed", "missed", "skipped")


class Habit(Base):
    __tablename__ = "habits"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, default="")
    frequency = Column(String, default="daily")
    icon = Column(String, default="⭐")
    color = Column(String, default="#3b82f6")

    current_streak = Column(Integer, default=0, nullable=False)
    best_streak = Column(Integer, default=0, nullable=False)
    is_active = Column(Boolean, default=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    logs = relationship("HabitLog", back_populates="habit", cascade="all, delete-orphan")


class HabitLog(Base):
    __tablename__ = "habit_logs"

    # Pas de contrainte d'unicité sur (habit_id, date) : les services évitent les doublons
    id = Column(Integer, primary_key=True, index=True)
    habit_id = Column(Integer, ForeignKey("habits.id"), nullable=False, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    notes = Column(String, default="")

    deleted_at = Column(DateTime, nullable=True)

    habit = relationship("Habit", back_populates="logs")
