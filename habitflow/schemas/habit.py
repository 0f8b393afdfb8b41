from pydantic import BaseModel, ConfigDict, Field
from datetime import date, datetime
from typing import Literal, Optional

Frequency = Literal["daily", "weekly", "custom"]
LogStatus = Literal["completed", "missed", "skipped"]

# Schemas habitudes

class HabitCreate(BaseModel):
    title: str
    description: str = ""
    frequency: Frequency = "daily"
    icon: str = "⭐"
    color: str = "#3b82f6"

class HabitUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    frequency: Optional[Frequency] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    is_active: Optional[bool] = None

class HabitResponse(BaseModel):
    id: int
    user_id: int
    title: str
    description: Optional[str]
    frequency: str
    icon: str
    color: str
    current_streak: int = Field(ge=0)
    best_streak: int = Field(ge=0)
    is_active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

class HabitLogResponse(BaseModel):
    id: int
    habit_id: int
    date: date
    status: LogStatus
    completed_at: Optional[datetime]
    notes: Optional[str]

    model_config = ConfigDict(from_attributes=True)
