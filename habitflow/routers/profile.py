"""
Router du profil : préférences, date de début d'historique, remise à zéro
"""

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from habitflow.core.database import get_db
from habitflow.core.security import get_current_user
from habitflow.models.user import User
from habitflow.schemas.profile import ProfileResponse, ProfileUpdate, ResetRequest, RestoreRequest
from habitflow.services.events import UserChannels
from habitflow.services.settings_service import (
    get_or_create_profile,
    reset_all_progress,
    reset_habits_progress,
    reset_tasks,
    restore_rows,
    set_history_started_now,
    update_profile
)
from habitflow.services.today_service import publish_progress
from habitflow.routers.today import get_channels

router = APIRouter(prefix="/profile", tags=["profile"])


@router.get("", response_model=ProfileResponse)
def read_profile(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return get_or_create_profile(db, current_user.id, username=current_user.username)


@router.put("", response_model=ProfileResponse)
def edit_profile(
    profile_data: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    # seuls les champs envoyés sont modifiés
    return update_profile(db, current_user.id, **profile_data.model_dump(exclude_unset=True))


@router.post("/history-start", response_model=ProfileResponse)
def restart_history(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    return set_history_started_now(db, current_user.id)


@router.post("/reset")
def reset_progress(
    request: ResetRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    if request.scope == "tasks":
        result = reset_tasks(db, current_user.id)
    elif request.scope == "habits":
        result = reset_habits_progress(db, current_user.id)
    else:
        result = reset_all_progress(db, current_user.id)

    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return result


@router.post("/restore")
def restore(
    request: RestoreRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    channels: UserChannels = Depends(get_channels)
):
    restored = restore_rows(db, current_user.id, request.table, request.ids)
    if request.ids and not restored:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Nothing to restore")

    publish_progress(db, current_user.id, channels.bus_for(current_user.id))
    return {"table": request.table, "restored_ids": restored}
