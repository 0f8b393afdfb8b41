from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import Optional

from habitflow.core.database import get_db
from habitflow.core.security import get_current_user
from habitflow.models.user import User
from habitflow.schemas.history import HistoryLogEntry, HistoryResponse, HistoryStatsResponse
from habitflow.schemas.task import TaskHistoryResponse
from habitflow.services.events import UserChannels
from habitflow.services.history_service import (
    PERIODS,
    clear_history,
    delete_task_history_entry,
    get_history
)
from habitflow.services.today_service import publish_progress
from habitflow.routers.today import get_channels

router = APIRouter(prefix="/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
def read_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    status_filter: Optional[str] = Query(None),
    period: str = Query("all")
):
    if period not in PERIODS:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid period")
    if status_filter not in ("completed", "missed", "skipped"):
        status_filter = None

    rows, tasks, stats = get_history(db, current_user.id, status=status_filter, period=period)

    return HistoryResponse(
        habit_logs=[
            HistoryLogEntry(
                id=log.id,
                habit_id=log.habit_id,
                habit_title=habit.title,
                habit_color=habit.color,
                date=log.date,
                status=log.status,
                completed_at=log.completed_at,
                notes=log.notes
            )
            for log, habit in rows
        ],
        task_history=[TaskHistoryResponse.model_validate(entry) for entry in tasks],
        stats=HistoryStatsResponse(**stats.__dict__)
    )


@router.delete("/tasks/{entry_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_history_entry(
    entry_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    if not delete_task_history_entry(db, current_user.id, entry_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History entry not found")


@router.delete("")
def delete_all_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    result = clear_history(db, current_user.id)
    # les logs du jour disparaissent aussi
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return result
