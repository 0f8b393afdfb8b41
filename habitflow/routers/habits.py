from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List

from habitflow.core.config import settings
from habitflow.core.database import get_db
from habitflow.core.security import get_current_user
from habitflow.models.user import User
from habitflow.models.habit import Habit
from habitflow.schemas.habit import HabitCreate, HabitUpdate, HabitResponse, HabitLogResponse
from habitflow.services.habit_service import get_habit, list_habits
from habitflow.services.events import UserChannels
from habitflow.services.habit_store import HabitStore
from habitflow.services.today_service import publish_progress
from habitflow.routers.today import get_channels

router = APIRouter(prefix="/habits", tags=["habits"])


def get_habit_or_404(db: Session, user_id: int, habit_id: int) -> Habit:
    habit = get_habit(db, user_id, habit_id)
    if not habit:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Habit not found")
    return habit


@router.post("", response_model=HabitResponse, status_code=status.HTTP_201_CREATED)
def create_habit(
    habit_data: HabitCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    new_habit = Habit(user_id=current_user.id, **habit_data.model_dump())
    db.add(new_habit)
    db.commit()
    db.refresh(new_habit)
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return new_habit


@router.get("", response_model=List[HabitResponse])
def get_habits(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # Premier passage : habitudes d'exemple
    return list_habits(db, current_user.id)


@router.get("/{habit_id}", response_model=HabitResponse)
def read_habit(
    habit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_habit_or_404(db, current_user.id, habit_id)


@router.get("/{habit_id}/logs", response_model=List[HabitLogResponse])
def read_habit_logs(
    habit_id: int,
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    habit = get_habit_or_404(db, current_user.id, habit_id)
    return HabitStore(db).list_logs(habit.id, min(limit, settings.STREAK_LOOKBACK))


@router.put("/{habit_id}", response_model=HabitResponse)
def update_habit(
    habit_id: int,
    habit_data: HabitUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    habit = get_habit_or_404(db, current_user.id, habit_id)

    # Les champs de streak ne sont modifiés que par le recalcul
    update_data = habit_data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(habit, field, value)

    db.commit()
    db.refresh(habit)
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return habit


@router.post("/{habit_id}/toggle-active", response_model=HabitResponse)
def toggle_active(
    habit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    habit = get_habit_or_404(db, current_user.id, habit_id)
    habit.is_active = not habit.is_active
    db.commit()
    db.refresh(habit)
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return habit


@router.delete("/{habit_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_habit(
    habit_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    habit = get_habit_or_404(db, current_user.id, habit_id)
    # supprime aussi ses logs (cascade)
    db.delete(habit)
    db.commit()
    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
