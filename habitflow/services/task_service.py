"""Task service"""

import logging
from sqlalchemy.orm import Session
from datetime import date, datetime, timedelta
from typing import List, Optional

from habitflow.core.config import settings
from habitflow.core.errors import InvalidTransition
from habitflow.models.task import Task, TaskHistory, TASK_STATUSES

logger = logging.getLogger(__name__)


def _sample_tasks(today: date) -> List[dict]:
    return [
        {
            "title": "Review project documentation",
            "description": "Go through the project requirements and update documentation",
            "priority": "high",
            "status": "pending",
            "due_date": today + timedelta(days=1),
        },
        {
            "title": "Team meeting preparation",
            "description": "Prepare agenda and notes for the weekly team meeting",
            "priority": "medium",
            "status": "pending",
            "due_date": None,
        },
        {
            "title": "Code review",
            "description": "Review pull requests and provide feedback",
            "priority": "high",
            "status": "in_progress",
            "due_date": today,
        },
        {
            "title": "Update dependencies",
            "description": "Check and update packages to latest versions",
            "priority": "low",
            "status": "pending",
            "due_date": None,
        },
        {
            "title": "Write unit tests",
            "description": "Add test coverage for new features",
            "priority": "medium",
            "status": "pending",
            "due_date": today + timedelta(days=2),
        },
    ]


def create_sample_tasks(db: Session, user_id: int, today: date = None) -> List[Task]:
    if today is None:
        today = date.today()
    tasks = [Task(user_id=user_id, **data) for data in _sample_tasks(today)]
    db.add_all(tasks)
    db.commit()
    logger.info(f"Seeded {len(tasks)} sample tasks for user {user_id}")
    return tasks


def list_tasks(
    db: Session,
    user_id: int,
    status_filter: Optional[str] = None,
    priority_filter: Optional[str] = None,
    seed: Optional[bool] = None
) -> List[Task]:
    if seed is None:
        seed = settings.SEED_SAMPLE_DATA

    base = db.query(Task).filter(
        Task.user_id == user_id,
        Task.deleted_at.is_(None)
    )
    if seed and base.count() == 0:
        create_sample_tasks(db, user_id)

    query = base
    if status_filter:
        query = query.filter(Task.status == status_filter)
    if priority_filter:
        query = query.filter(Task.priority == priority_filter)

    return query.order_by(Task.created_at.desc(), Task.id.desc()).all()


def get_today_tasks(db: Session, user_id: int, today: date = None) -> List[Task]:
    if today is None:
        today = date.today()

    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.deleted_at.is_(None),
        Task.due_date == today
    ).all()


def get_overdue_tasks(db: Session, user_id: int, today: date = None) -> List[Task]:
    if today is None:
        today = date.today()

    return db.query(Task).filter(
        Task.user_id == user_id,
        Task.deleted_at.is_(None),
        Task.due_date < today,
        Task.status != "completed"
    ).all()


def set_task_status(db: Session, task: Task, new_status: str, now: datetime = None) -> Optional[TaskHistory]:
    """
    Change le statut d'une tâche.

    - passage à `completed` : completed_at = now + snapshot TaskHistory
    - sortie de `completed` : completed_at effacé
    Retourne le snapshot créé, ou None.
    """
    if new_status not in TASK_STATUSES:
        raise InvalidTransition(f"Invalid status: {new_status}")
    if now is None:
        now = datetime.utcnow()

    snapshot = None
    if new_status == "completed":
        if task.status != "completed":
            task.completed_at = now
            snapshot = TaskHistory(
                user_id=task.user_id,
                task_id=task.id,
                title=task.title,
                description=task.description,
                priority=task.priority,
                due_date=task.due_date,
                created_at=task.created_at or now,
                completed_at=now,
                archived_at=now
            )
            db.add(snapshot)
    else:
        task.completed_at = None

    task.status = new_status
    db.commit()
    db.refresh(task)
    return snapshot
