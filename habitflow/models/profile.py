"""Profile model"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
from datetime import datetime
from habitflow.core.database import Base


def default_preferences():
    return {"theme": "dark"}


class Profile(Base):
    __tablename__ = "profiles"

    id = Column(Integer, ForeignKey("users.id"), primary_key=True)

    full_name = Column(String, nullable=True)
    username = Column(String, nullable=True)
    preferences = Column(JSON, default=default_preferences)
    # Les enregistrements antérieurs à cette date ne sont pas affichés
    history_started_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
