"""History service"""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import List, Optional, Tuple

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from habitflow.models.habit import Habit, HabitLog
from habitflow.models.profile import Profile
from habitflow.models.task import TaskHistory
from habitflow.services.progress_service import compute_progress_from_counts

HISTORY_LIMIT = 100
PERIODS = ("all", "week", "month")


@dataclass
class HistoryStats:
    completed: int
    missed: int
    total: int
    completion_rate: int


def get_period_start(period: str, today: date) -> Optional[date]:
    if period == "week":
        return today - timedelta(days=7)
    if period == "month":
        return today - relativedelta(months=1)
    return None


def get_history_fence(db: Session, user_id: int) -> Optional[datetime]:
    profile = db.query(Profile).filter(Profile.id == user_id).first()
    if profile is None:
        return None
    return profile.history_started_at


def compute_history_stats(logs: List[HabitLog]) -> HistoryStats:
    completed = sum(1 for log in logs if log.status == "completed")
    missed = sum(1 for log in logs if log.status == "missed")
    total = len(logs)
    # même arrondi que la progression du jour
    rate = compute_progress_from_counts(total, completed, 0, 0)
    return HistoryStats(completed=completed, missed=missed, total=total, completion_rate=rate)


def get_history(
    db: Session,
    user_id: int,
    status: Optional[str] = None,
    period: str = "all",
    today: date = None
) -> Tuple[List[Tuple[HabitLog, Habit]], List[TaskHistory], HistoryStats]:
    """
    Retourne (logs d'habitudes avec leur habitude, historique des tâches, stats).

    Rien d'antérieur à profile.history_started_at n'est retourné.
    Les stats portent sur les logs filtrés par période (pas par statut).
    """
    if today is None:
        today = date.today()

    log_query = db.query(HabitLog, Habit).join(Habit, Habit.id == HabitLog.habit_id).filter(
        HabitLog.user_id == user_id,
        HabitLog.deleted_at.is_(None)
    )
    task_query = db.query(TaskHistory).filter(
        TaskHistory.user_id == user_id,
        TaskHistory.deleted_at.is_(None)
    )

    fence = get_history_fence(db, user_id)
    if fence is not None:
        log_query = log_query.filter(HabitLog.date >= fence.date())
        task_query = task_query.filter(TaskHistory.completed_at >= fence)

    start = get_period_start(period, today)
    if start is not None:
        log_query = log_query.filter(HabitLog.date >= start)
        task_query = task_query.filter(
            TaskHistory.completed_at >= datetime.combine(start, datetime.min.time())
        )

    rows = log_query.order_by(HabitLog.date.desc(), HabitLog.id.desc()).limit(HISTORY_LIMIT).all()
    stats = compute_history_stats([log for log, _ in rows])

    if status:
        rows = [(log, habit) for log, habit in rows if log.status == status]

    tasks = task_query.order_by(TaskHistory.completed_at.desc()).limit(HISTORY_LIMIT).all()
    return rows, tasks, stats


def delete_task_history_entry(db: Session, user_id: int, entry_id: int) -> bool:
    deleted = db.query(TaskHistory).filter(
        TaskHistory.id == entry_id,
        TaskHistory.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return deleted > 0


def clear_history(db: Session, user_id: int) -> dict:
    """Suppression définitive de l'historique des tâches et des logs d'habitudes."""
    deleted_history = db.query(TaskHistory).filter(
        TaskHistory.user_id == user_id
    ).delete(synchronize_session=False)
    deleted_logs = db.query(HabitLog).filter(
        HabitLog.user_id == user_id
    ).delete(synchronize_session=False)
    db.commit()
    return {"deleted_task_history": deleted_history, "deleted_habit_logs": deleted_logs}
