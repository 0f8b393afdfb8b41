"""Pydantic schemas for task request/response validation."""

from pydantic import BaseModel, ConfigDict
from datetime import date, datetime
from typing import Literal, Optional

Priority = Literal["low", "medium", "high"]
TaskStatus = Literal["pending", "in_progress", "completed"]


class TaskCreate(BaseModel):
    title: str
    description: str = ""
    due_date: Optional[date] = None
    priority: Priority = "medium"
    status: TaskStatus = "pending"


class TaskUpdate(BaseModel):
    """Schema for updating an existing task (status goes through /status)."""

    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[date] = None
    priority: Optional[Priority] = None


class TaskResponse(BaseModel):
    """Schema for task responses from API."""

    id: int
    user_id: int
    title: str
    description: Optional[str]
    due_date: Optional[date]
    priority: str
    status: str
    completed_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class TaskHistoryResponse(BaseModel):
    id: int
    task_id: int
    title: str
    description: Optional[str]
    priority: str
    due_date: Optional[date]
    created_at: datetime
    completed_at: datetime
    archived_at: Optional[datetime]

    model_config = ConfigDict(from_attributes=True)
