"""
Vue "aujourd'hui" : backfill → streaks → lecture du jour → progression.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from habitflow.core.errors import StorageError
from habitflow.models.habit import Habit, HabitLog
from habitflow.models.task import Task
from habitflow.services.events import EventBus, ItemCompleted, ProgressUpdated
from habitflow.services.habit_store import HabitStore
from habitflow.services.progress_service import compute_progress, get_motivational_message
from habitflow.services.streak_service import get_today, run_backfill_and_recompute, update_habit_streaks

logger = logging.getLogger(__name__)


@dataclass
class TodaySnapshot:
    day: date
    habits: List[Habit]
    logs_by_habit: Dict[int, HabitLog]
    open_tasks: List[Task]
    task_count: int
    completed_task_count: int
    progress: int
    message: str = field(default="")

    @property
    def completed_habit_count(self) -> int:
        return sum(
            1 for habit in self.habits
            if self.logs_by_habit.get(habit.id) is not None
            and self.logs_by_habit[habit.id].status == "completed"
        )


def read_today(store: HabitStore, user_id: int, today: date) -> TodaySnapshot:
    habits = store.list_active_habits(user_id)
    tasks = store.list_tasks(user_id)
    logs_by_habit = {log.habit_id: log for log in store.list_today_logs(user_id, today)}

    progress = compute_progress(habits, logs_by_habit, tasks)
    return TodaySnapshot(
        day=today,
        habits=habits,
        logs_by_habit=logs_by_habit,
        open_tasks=[task for task in tasks if task.status != "completed"],
        task_count=len(tasks),
        completed_task_count=sum(1 for task in tasks if task.status == "completed"),
        progress=progress,
        message=get_motivational_message(progress)
    )


def load_today(db: Session, user_id: int, bus: Optional[EventBus] = None, today: date = None) -> TodaySnapshot:
    """Charge la vue du jour. La maintenance des streaks est faite avant toute lecture."""
    if today is None:
        today = get_today()

    store = HabitStore(db)
    run_backfill_and_recompute(store, user_id, today)

    snapshot = read_today(store, user_id, today)
    if bus is not None:
        bus.publish(ProgressUpdated(snapshot.progress))
    return snapshot


def toggle_habit_today(
    db: Session,
    user_id: int,
    habit: Habit,
    bus: Optional[EventBus] = None,
    today: date = None,
    now: datetime = None
) -> TodaySnapshot:
    """
    Bascule le log du jour d'une habitude.

    pas de log → completed ; completed → missed ; missed/skipped → completed
    """
    if today is None:
        today = get_today()
    if now is None:
        now = datetime.utcnow()

    store = HabitStore(db)
    existing = store.find_log(habit.id, today)

    if existing is None:
        new_status = "completed"
        store.insert_log(HabitLog(
            habit_id=habit.id,
            user_id=user_id,
            date=today,
            status=new_status,
            completed_at=now
        ))
    else:
        new_status = "missed" if existing.status == "completed" else "completed"
        existing.status = new_status
        existing.completed_at = now if new_status == "completed" else None
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise StorageError("update_log", e)

    update_habit_streaks(store, user_id, today)
    snapshot = read_today(store, user_id, today)

    if bus is not None:
        bus.publish(ProgressUpdated(snapshot.progress))
        if new_status == "completed":
            bus.publish(ItemCompleted(item_type="habit", id=habit.id, source="today"))

    return snapshot


def publish_progress(db: Session, user_id: int, bus: EventBus, today: date = None) -> int:
    """Recalcule la progression après une mutation et la diffuse."""
    if today is None:
        today = get_today()

    snapshot = read_today(HabitStore(db), user_id, today)
    bus.publish(ProgressUpdated(snapshot.progress))
    return snapshot.progress
