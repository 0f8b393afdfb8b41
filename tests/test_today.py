"""
Tests pour la vue du jour (service + endpoints)
"""

from datetime import date, timedelta

from habitflow.models.habit import HabitLog
from habitflow.models.task import Task
from habitflow.services.events import EventBus, FullCompletion, ItemCompleted, ProgressUpdated
from habitflow.services.today_service import load_today, toggle_habit_today
from conftest import TODAY


def add_task(db, user, status="pending", **kwargs):
    task = Task(user_id=user.id, title=kwargs.pop("title", "Task"), status=status, **kwargs)
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


# ============ TESTS SERVICE ============

def test_load_today_runs_backfill_before_reading(db, user, make_habit, add_logs):
    habit = make_habit()
    add_logs(habit, ["completed", "completed"], start=TODAY - timedelta(days=2))

    snapshot = load_today(db, user.id, today=TODAY)

    # le missed d'hier a été inséré et la streak recalculée avant la lecture
    assert snapshot.habits[0].current_streak == 0
    assert snapshot.habits[0].best_streak == 2
    assert db.query(HabitLog).filter(HabitLog.date == TODAY - timedelta(days=1)).count() == 1


def test_load_today_progress_and_publish(db, user, make_habit, add_logs):
    first = make_habit(title="A")
    make_habit(title="B")
    add_logs(first, ["completed"])
    add_task(db, user, status="completed", due_date=TODAY + timedelta(days=10))
    add_task(db, user, status="pending")

    bus = EventBus()
    received = []
    bus.subscribe(ProgressUpdated, received.append)

    snapshot = load_today(db, user.id, bus, today=TODAY)

    assert snapshot.progress == 50
    assert snapshot.completed_habit_count == 1
    assert snapshot.task_count == 2
    assert snapshot.completed_task_count == 1
    assert [t.status for t in snapshot.open_tasks] == ["pending"]
    assert received == [ProgressUpdated(50)]


def test_toggle_cycle(db, user, make_habit):
    habit = make_habit()

    snapshot = toggle_habit_today(db, user.id, habit, today=TODAY)
    assert snapshot.logs_by_habit[habit.id].status == "completed"
    assert snapshot.logs_by_habit[habit.id].completed_at is not None
    assert snapshot.habits[0].current_streak == 1

    snapshot = toggle_habit_today(db, user.id, habit, today=TODAY)
    assert snapshot.logs_by_habit[habit.id].status == "missed"
    assert snapshot.logs_by_habit[habit.id].completed_at is None
    assert snapshot.habits[0].current_streak == 0

    snapshot = toggle_habit_today(db, user.id, habit, today=TODAY)
    assert snapshot.logs_by_habit[habit.id].status == "completed"
    # toujours un seul log pour le jour
    assert db.query(HabitLog).filter(HabitLog.habit_id == habit.id).count() == 1


def test_toggle_publishes_item_completed_and_progress(db, user, make_habit):
    habit = make_habit()
    bus = EventBus()
    received = []
    for event_type in (ItemCompleted, ProgressUpdated):
        bus.subscribe(event_type, received.append)

    toggle_habit_today(db, user.id, habit, bus, today=TODAY)

    assert ProgressUpdated(100) in received
    assert ItemCompleted(item_type="habit", id=habit.id, source="today") in received


# ============ TESTS ENDPOINTS ============

def test_today_requires_auth(client):
    assert client.get("/today").status_code == 401


def test_today_endpoint(client, auth_headers, make_habit):
    make_habit()

    response = client.get("/today", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["date"] == date.today().isoformat()
    assert data["habit_count"] == 1
    assert data["progress"] == 0
    assert data["message"] == "Let's start your day strong!"
    assert {"kind": "progress-updated", "percentage": 0} in data["events"]


def test_toggle_to_full_completion_celebrates_once(client, auth_headers, make_habit):
    habit = make_habit()

    response = client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["progress"] == 100
    kinds = [event["kind"] for event in data["events"]]
    assert "full-completion" in kinds
    assert "item-completed" in kinds
    assert data["habits"][0]["log"]["status"] == "completed"
    assert data["habits"][0]["habit"]["current_streak"] == 1

    # rechargement : toujours 100%, pas de nouvelle célébration
    data = client.get("/today", headers=auth_headers).json()
    assert data["progress"] == 100
    assert "full-completion" not in [event["kind"] for event in data["events"]]


def test_dismiss_cooldown_blocks_immediate_reopen(client, auth_headers, make_habit):
    habit = make_habit()
    client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers)

    assert client.post("/today/celebration/dismiss", headers=auth_headers).status_code == 204

    # repasse sous 100 puis revient à 100 dans la fenêtre de 5s
    client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers)
    data = client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers).json()

    assert data["progress"] == 100
    assert "full-completion" not in [event["kind"] for event in data["events"]]


def test_toggle_unknown_habit(client, auth_headers):
    response = client.post("/today/habits/999/toggle", headers=auth_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Habit not found"
