"""
Service de paramètres - profil, remise à zéro (soft delete) et restauration
"""

import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from habitflow.models.habit import Habit, HabitLog
from habitflow.models.profile import Profile
from habitflow.models.task import Task, TaskHistory

logger = logging.getLogger(__name__)

RESTORABLE_MODELS = {
    "tasks": Task,
    "task_history": TaskHistory,
    "habit_logs": HabitLog,
}

_UNSET = object()


def get_or_create_profile(db: Session, user_id: int, username: Optional[str] = None) -> Profile:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        profile = Profile(id=user_id, username=username, history_started_at=datetime.utcnow())
        db.add(profile)
        db.commit()
        db.refresh(profile)
    return profile


def update_profile(
    db: Session,
    user_id: int,
    full_name=_UNSET,
    username=_UNSET,
    preferences=_UNSET,
    history_started_at=_UNSET
) -> Profile:
    profile = get_or_create_profile(db, user_id)

    if full_name is not _UNSET:
        profile.full_name = full_name
    if username is not _UNSET:
        profile.username = username
    if preferences is not _UNSET:
        # fusion : on garde les clés non fournies (ex: theme)
        merged = dict(profile.preferences or {})
        merged.update(preferences or {})
        profile.preferences = merged
    if history_started_at is not _UNSET:
        profile.history_started_at = history_started_at

    db.commit()
    db.refresh(profile)
    return profile


def set_history_started_now(db: Session, user_id: int, now: datetime = None) -> Profile:
    if now is None:
        now = datetime.utcnow()
    return update_profile(db, user_id, history_started_at=now)


def _soft_delete(db: Session, model, user_id: int, now: datetime) -> List[int]:
    rows = db.query(model).filter(
        model.user_id == user_id,
        model.deleted_at.is_(None)
    ).all()
    for row in rows:
        row.deleted_at = now
    return [row.id for row in rows]


def reset_tasks(db: Session, user_id: int, now: datetime = None) -> dict:
    """Soft delete des tâches et de leur historique (annulable via restore_rows)."""
    if now is None:
        now = datetime.utcnow()

    history_ids = _soft_delete(db, TaskHistory, user_id, now)
    task_ids = _soft_delete(db, Task, user_id, now)
    db.commit()

    return {
        "deleted_history_count": len(history_ids),
        "deleted_tasks_count": len(task_ids),
        "deleted_history_ids": history_ids,
        "deleted_task_ids": task_ids,
        "deleted_at": now,
    }


def reset_habits_progress(db: Session, user_id: int, now: datetime = None) -> dict:
    """Soft delete des logs d'habitudes et remise à zéro des streaks."""
    if now is None:
        now = datetime.utcnow()

    log_ids = _soft_delete(db, HabitLog, user_id, now)
    updated = db.query(Habit).filter(Habit.user_id == user_id).update(
        {"current_streak": 0, "best_streak": 0},
        synchronize_session="fetch"
    )
    db.commit()

    return {
        "deleted_logs_count": len(log_ids),
        "deleted_log_ids": log_ids,
        "updated_habits_count": updated,
        "deleted_at": now,
    }


def reset_all_progress(db: Session, user_id: int, now: datetime = None) -> dict:
    if now is None:
        now = datetime.utcnow()

    tasks_result = reset_tasks(db, user_id, now)
    habits_result = reset_habits_progress(db, user_id, now)
    logger.info(f"Progress reset for user {user_id}")

    return {
        "tasks_result": tasks_result,
        "habits_result": habits_result,
        "summary": {
            "total_deleted_history": tasks_result["deleted_history_count"],
            "total_deleted_tasks": tasks_result["deleted_tasks_count"],
            "total_deleted_habit_logs": habits_result["deleted_logs_count"],
            "total_updated_habits": habits_result["updated_habits_count"],
            "deleted_at": now,
        },
    }


def restore_rows(db: Session, user_id: int, table: str, ids: List[int]) -> List[int]:
    """Annule un soft delete, toujours scopé par propriétaire."""
    if not ids:
        return []

    model = RESTORABLE_MODELS.get(table)
    if model is None:
        raise ValueError(f"Unknown table: {table}")

    rows = db.query(model).filter(
        model.user_id == user_id,
        model.id.in_(ids),
        model.deleted_at.isnot(None)
    ).all()
    for row in rows:
        row.deleted_at = None
    db.commit()
    return [row.id for row in rows]
