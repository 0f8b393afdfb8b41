from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    username: Optional[str] = None
    preferences: Optional[Dict[str, Any]] = None
    history_started_at: Optional[datetime] = None


class ProfileResponse(BaseModel):
    id: int
    full_name: Optional[str]
    username: Optional[str]
    preferences: Dict[str, Any]
    history_started_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ResetRequest(BaseModel):
    scope: Literal["tasks", "habits", "all"] = "all"


class RestoreRequest(BaseModel):
    table: Literal["tasks", "task_history", "habit_logs"]
    ids: List[int]
