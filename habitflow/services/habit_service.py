"""Habit service"""

import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from habitflow.core.config import settings
from habitflow.models.habit import Habit

logger = logging.getLogger(__name__)

SAMPLE_HABITS = [
    {
        "title": "Morning Exercise",
        "description": "Start your day with 30 minutes of physical activity",
        "frequency": "daily",
        "icon": "💪",
        "color": "#3b82f6",
    },
    {
        "title": "Read for 30 minutes",
        "description": "Expand your knowledge by reading daily",
        "frequency": "daily",
        "icon": "📚",
        "color": "#10b981",
    },
    {
        "title": "Drink 8 glasses of water",
        "description": "Stay hydrated throughout the day",
        "frequency": "daily",
        "icon": "💧",
        "color": "#06b6d4",
    },
    {
        "title": "Meditation",
        "description": "Take 10 minutes for mindfulness and relaxation",
        "frequency": "daily",
        "icon": "🧘",
        "color": "#8b5cf6",
    },
    {
        "title": "Journal Writing",
        "description": "Reflect on your day and write down thoughts",
        "frequency": "daily",
        "icon": "✍️",
        "color": "#f59e0b",
    },
]


def create_sample_habits(db: Session, user_id: int) -> List[Habit]:
    habits = [Habit(user_id=user_id, **data) for data in SAMPLE_HABITS]
    db.add_all(habits)
    db.commit()
    logger.info(f"Seeded {len(habits)} sample habits for user {user_id}")
    return habits


def list_habits(db: Session, user_id: int, seed: Optional[bool] = None) -> List[Habit]:
    """Liste les habitudes (plus récentes d'abord) ; premier passage → habitudes d'exemple."""
    if seed is None:
        seed = settings.SEED_SAMPLE_DATA

    query = db.query(Habit).filter(Habit.user_id == user_id)
    if seed and query.count() == 0:
        create_sample_habits(db, user_id)

    return query.order_by(Habit.created_at.desc(), Habit.id.desc()).all()


def get_habit(db: Session, user_id: int, habit_id: int) -> Optional[Habit]:
    return db.query(Habit).filter(
        Habit.id == habit_id,
        Habit.user_id == user_id
    ).first()
