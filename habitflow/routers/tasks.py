from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from habitflow.core.database import get_db
from habitflow.core.errors import InvalidTransition
from habitflow.core.security import get_current_user
from habitflow.models.user import User
from habitflow.models.task import Task, TASK_PRIORITIES, TASK_STATUSES
from habitflow.schemas.task import TaskCreate, TaskUpdate, TaskResponse
from habitflow.services.events import ItemCompleted, UserChannels
from habitflow.services.task_service import (
    list_tasks,
    get_today_tasks,
    get_overdue_tasks,
    set_task_status
)
from habitflow.services.today_service import publish_progress
from habitflow.routers.today import get_channels

router = APIRouter(prefix="/tasks", tags=["tasks"])


def get_task_or_404(db: Session, user_id: int, task_id: int) -> Task:
    task = db.query(Task).filter(
        Task.id == task_id,
        Task.user_id == user_id,
        Task.deleted_at.is_(None)
    ).first()

    if not task:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Task not found")

    return task


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task(
    task_data: TaskCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    new_task = Task(
        user_id=current_user.id,
        title=task_data.title,
        description=task_data.description,
        due_date=task_data.due_date,
        priority=task_data.priority,
        status="pending"
    )
    db.add(new_task)
    db.commit()
    db.refresh(new_task)

    # une tâche créée directement "completed" passe par la même transition (snapshot)
    if task_data.status != "pending":
        set_task_status(db, new_task, task_data.status)

    # une nouvelle tâche change le total : la progression est rediffusée
    bus = channels.bus_for(current_user.id)
    publish_progress(db, current_user.id, bus)
    if new_task.status == "completed":
        bus.publish(ItemCompleted(item_type="task", id=new_task.id, source="tasks"))
    return new_task


@router.get("", response_model=List[TaskResponse])
def get_tasks(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[str] = Query(None),
    priority_filter: Optional[str] = Query(None)
):
    if status_filter not in TASK_STATUSES:
        status_filter = None
    if priority_filter not in TASK_PRIORITIES:
        priority_filter = None

    return list_tasks(db, current_user.id, status_filter, priority_filter)


@router.get("/today", response_model=List[TaskResponse])
def today(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_today_tasks(db, current_user.id)


@router.get("/overdue", response_model=List[TaskResponse])
def overdue(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_overdue_tasks(db, current_user.id)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_task_or_404(db, current_user.id, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    task_data: TaskUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    task = get_task_or_404(db, current_user.id, task_id)

    update_data = task_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_task(
    task_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    task = get_task_or_404(db, current_user.id, task_id)
    db.delete(task)
    db.commit()
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))


@router.post("/{task_id}/status", response_model=TaskResponse)
def update_status(
    task_id: int,
    new_status: str = Query(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    task = get_task_or_404(db, current_user.id, task_id)

    try:
        set_task_status(db, task, new_status)
    except InvalidTransition:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")

    bus = channels.bus_for(current_user.id)
    publish_progress(db, current_user.id, bus)
    if new_status == "completed":
        bus.publish(ItemCompleted(item_type="task", id=task.id, source="tasks"))

    return task
