"""Task and TaskHistory models"""

from sqlalchemy import Column, Integer, String, DateTime, Date, ForeignKey
from datetime import datetime
from habitflow.core.database import Base

TASK_PRIORITIES = ("low", "medium", "high")
TASK_STATUSES = ("pending", "in_progress", "completed")


class Task(Base):
    __tablename__ = "tasks"
    
    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    
    title = Column(String, nullable=False)
    description = Column(String, default="")
    due_date = Column(Date, nullable=True, index=True)
    priority = Column(String, default="medium")
    status = Column(String, default="pending")
    completed_at = Column(DateTime, nullable=True)
    
    deleted_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)


class TaskHistory(Base):
    """Snapshot immuable d'une tâche au moment de sa complétion"""
    __tablename__ = "task_history"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    task_id = Column(Integer, nullable=False, index=True)

    title = Column(String, nullable=False)
    description = Column(String, default="")
    priority = Column(String, nullable=False)
    due_date = Column(Date, nullable=True)
    created_at = Column(DateTime, nullable=False)
    completed_at = Column(DateTime, nullable=False)
    archived_at = Column(DateTime, default=datetime.utcnow)

    deleted_at = Column(DateTime, nullable=True)
