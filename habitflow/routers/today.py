"""
Router de la vue du jour : maintenance des streaks, progression, célébrations
"""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from habitflow.core.database import get_db
from habitflow.core.security import get_current_user
from habitflow.models.user import User
from habitflow.schemas.habit import HabitResponse, HabitLogResponse
from habitflow.schemas.task import TaskResponse
from habitflow.schemas.today import TodayHabit, TodayResponse
from habitflow.services.events import EventRecorder, UserChannels
from habitflow.services.habit_service import get_habit
from habitflow.services.today_service import TodaySnapshot, load_today, toggle_habit_today

router = APIRouter(prefix="/today", tags=["today"])


def get_channels(request: Request) -> UserChannels:
    return request.app.state.channels


def serialize_events(events: List) -> List[dict]:
    return [asdict(event) for event in events]


def to_response(snapshot: TodaySnapshot, events: List) -> TodayResponse:
    habits = []
    for habit in snapshot.habits:
        log = snapshot.logs_by_habit.get(habit.id)
        habits.append(TodayHabit(
            habit=HabitResponse.model_validate(habit),
            log=HabitLogResponse.model_validate(log) if log is not None else None
        ))

    return TodayResponse(
        date=snapshot.day,
        habits=habits,
        tasks=[TaskResponse.model_validate(task) for task in snapshot.open_tasks],
        habit_count=len(snapshot.habits),
        completed_habit_count=snapshot.completed_habit_count,
        task_count=snapshot.task_count,
        completed_task_count=snapshot.completed_task_count,
        progress=snapshot.progress,
        message=snapshot.message,
        events=serialize_events(events)
    )


@router.get("", response_model=TodayResponse)
def today(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    """
    Backfill d'hier + recalcul des streaks, puis lecture du jour.

    `events` contient les événements diffusés pendant la requête
    (progress-updated, full-completion).
    """
    bus = channels.bus_for(current_user.id)
    with EventRecorder(bus) as recorder:
        snapshot = load_today(db, current_user.id, bus)
    return to_response(snapshot, recorder.events)


@router.post("/habits/{habit_id}/toggle", response_model=TodayResponse)
def toggle_habit(
    habit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    habit = get_habit(db, current_user.id, habit_id)
    if not habit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")

    bus = channels.bus_for(current_user.id)
    with EventRecorder(bus) as recorder:
        snapshot = toggle_habit_today(db, current_user.id, habit, bus)
    return to_response(snapshot, recorder.events)


@router.post("/celebration/dismiss", status_code=status.HTTP_204_NO_CONTENT)
def dismiss_celebration(
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    channels.gate_for(current_user.id).dismiss()
