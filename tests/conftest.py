import os
import sys
from pathlib import Path

# Ajoute la racine du projet au PYTHONPATH EN PREMIER
sys.path.insert(0, str(Path(__file__).parent.parent))

# Pas de données d'exemple pendant les tests
os.environ["SEED_SAMPLE_DATA"] = "false"

from datetime import date, datetime, timedelta

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

# Créer engine SQLite pour tests AVANT d'importer l'app
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///./test.db"
test_engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

# PATCH: remplacer le engine et SessionLocal du core.database AVANT d'importer l'app
import habitflow.core.database
habitflow.core.database.engine = test_engine
habitflow.core.database.SessionLocal = TestingSessionLocal

from habitflow.core.database import Base, get_db
from habitflow.core.security import create_access_token
from habitflow.main import app
from habitflow.models.habit import Habit, HabitLog
from habitflow.models.user import User
from habitflow.services.events import FullCompletion, ItemCompleted, ProgressUpdated, UserChannels
from habitflow.services.settings_service import get_or_create_profile


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db

TODAY = date(2024, 6, 15)
LONG_AGO = datetime(2024, 1, 1, 8, 0)


@pytest.fixture(autouse=True)
def setup_teardown():
    """Crée et nettoie la DB avant/après chaque test"""
    Base.metadata.drop_all(bind=test_engine)
    Base.metadata.create_all(bind=test_engine)
    # état de célébration neuf pour chaque test
    app.state.channels = UserChannels(cooldown_seconds=5)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def client():
    """Client de test FastAPI"""
    return TestClient(app)


@pytest.fixture
def db():
    """Session DB pour les tests"""
    db = TestingSessionLocal()
    yield db
    db.close()


@pytest.fixture
def user(db):
    user = User(email="test@example.com", username="testuser")
    user.set_password("pass123")
    db.add(user)
    db.commit()
    db.refresh(user)
    get_or_create_profile(db, user.id, username=user.username)
    return user


@pytest.fixture
def auth_headers(user):
    token = create_access_token(user.id, user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def published(user):
    """Événements diffusés sur le bus de l'utilisateur pendant le test"""
    events = []
    bus = app.state.channels.bus_for(user.id)
    for event_type in (ItemCompleted, ProgressUpdated, FullCompletion):
        bus.subscribe(event_type, events.append)
    return events


@pytest.fixture
def make_habit(db, user):
    """Fabrique d'habitudes (créées bien avant TODAY par défaut)"""
    def _make(title="Drink Water", frequency="daily", is_active=True, created_at=LONG_AGO, owner=None):
        habit = Habit(
            user_id=(owner or user).id,
            title=title,
            frequency=frequency,
            is_active=is_active,
            created_at=created_at
        )
        db.add(habit)
        db.commit()
        db.refresh(habit)
        return habit
    return _make


@pytest.fixture
def add_logs(db, user):
    """add_logs(habit, ["completed", "missed", ...], start=TODAY) : le 1er statut est pour `start`, puis jour par jour vers le passé"""
    def _add(habit, statuses, start=TODAY):
        logs = []
        for offset, status in enumerate(statuses):
            if status is None:
                continue
            day = start - timedelta(days=offset)
            logs.append(HabitLog(
                habit_id=habit.id,
                user_id=habit.user_id,
                date=day,
                status=status,
                completed_at=datetime.combine(day, datetime.min.time()) if status == "completed" else None
            ))
        db.add_all(logs)
        db.commit()
        return logs
    return _add
