"""
Accès au store pour le moteur de streaks.

Chaque écriture est commitée immédiatement : une passe de backfill ou de
recalcul n'est pas transactionnelle, les lignes déjà écrites restent en
place si une opération suivante échoue.
"""

import logging
from datetime import date
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habitflow.core.errors import StorageError
from habitflow.models.habit import Habit, HabitLog
from habitflow.models.task import Task

logger = logging.getLogger(__name__)


class HabitStore:
    """Opérations de lecture/écriture toujours scopées par propriétaire."""

    def __init__(self, db: Session):
        self.db = db

    def _fail(self, operation: str, error: SQLAlchemyError):
        self.db.rollback()
        logger.error(f"Storage fault in {operation}: {error}")
        return StorageError(operation, error)

    def list_logs(self, habit_id: int, limit: int) -> List[HabitLog]:
        try:
            return self.db.query(HabitLog).filter(
                HabitLog.habit_id == habit_id,
                HabitLog.deleted_at.is_(None)
            ).order_by(HabitLog.date.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            raise self._fail("list_logs", e)

    def find_log(self, habit_id: int, day: date) -> Optional[HabitLog]:
        try:
            return self.db.query(HabitLog).filter(
                HabitLog.habit_id == habit_id,
                HabitLog.date == day,
                HabitLog.deleted_at.is_(None)
            ).first()
        except SQLAlchemyError as e:
            raise self._fail("find_log", e)

    def insert_log(self, log: HabitLog) -> HabitLog:
        try:
            self.db.add(log)
            self.db.commit()
            self.db.refresh(log)
            return log
        except SQLAlchemyError as e:
            raise self._fail("insert_log", e)

    def update_habit_aggregates(self, habit_id: int, current_streak: int, best_streak: int) -> None:
        try:
            self.db.query(Habit).filter(Habit.id == habit_id).update(
                {"current_streak": current_streak, "best_streak": best_streak},
                synchronize_session="fetch"
            )
            self.db.commit()
        except SQLAlchemyError as e:
            raise self._fail("update_habit_aggregates", e)

    def list_active_daily_habits(self, user_id: int) -> List[Habit]:
        try:
            return self.db.query(Habit).filter(
                Habit.user_id == user_id,
                Habit.is_active == True,
                Habit.frequency == "daily"
            ).order_by(Habit.id).all()
        except SQLAlchemyError as e:
            raise self._fail("list_active_daily_habits", e)

    def list_active_habits(self, user_id: int) -> List[Habit]:
        try:
            return self.db.query(Habit).filter(
                Habit.user_id == user_id,
                Habit.is_active == True
            ).order_by(Habit.created_at.desc(), Habit.id.desc()).all()
        except SQLAlchemyError as e:
            raise self._fail("list_active_habits", e)

    def list_tasks(self, user_id: int) -> List[Task]:
        try:
            return self.db.query(Task).filter(
                Task.user_id == user_id,
                Task.deleted_at.is_(None)
            ).order_by(Task.due_date.asc(), Task.id).all()
        except SQLAlchemyError as e:
            raise self._fail("list_tasks", e)

    def list_today_logs(self, user_id: int, day: date) -> List[HabitLog]:
        try:
            return self.db.query(HabitLog).filter(
                HabitLog.user_id == user_id,
                HabitLog.date == day,
                HabitLog.deleted_at.is_(None)
            ).all()
        except SQLAlchemyError as e:
            raise self._fail("list_today_logs", e)
