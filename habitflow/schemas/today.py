from pydantic import BaseModel
from typing import Any, Dict, List, Optional
from datetime import date

from habitflow.schemas.habit import HabitResponse, HabitLogResponse
from habitflow.schemas.task import TaskResponse


class TodayHabit(BaseModel):
    habit: HabitResponse
    log: Optional[HabitLogResponse] = None


class TodayResponse(BaseModel):
    date: date
    habits: List[TodayHabit]
    tasks: List[TaskResponse]
    habit_count: int
    completed_habit_count: int
    task_count: int
    completed_task_count: int
    progress: int
    message: str
    events: List[Dict[str, Any]] = []
