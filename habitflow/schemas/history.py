from pydantic import BaseModel
from typing import List, Optional
from datetime import date, datetime

from habitflow.schemas.task import TaskHistoryResponse


class HistoryLogEntry(BaseModel):
    id: int
    habit_id: int
    habit_title: str
    habit_color: str
    date: date
    status: str
    completed_at: Optional[datetime]
    notes: Optional[str]


class HistoryStatsResponse(BaseModel):
    completed: int
    missed: int
    total: int
    completion_rate: int


class HistoryResponse(BaseModel):
    habit_logs: List[HistoryLogEntry]
    task_history: List[TaskHistoryResponse]
    stats: HistoryStatsResponse
