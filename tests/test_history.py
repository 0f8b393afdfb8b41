"""
Tests pour l'historique
"""

from datetime import datetime, timedelta

from habitflow.models.profile import Profile
from habitflow.models.task import TaskHistory
from habitflow.services.events import FullCompletion, ProgressUpdated
from habitflow.services.history_service import compute_history_stats, get_history, get_period_start
from conftest import TODAY


def add_history(db, user, title, completed_at):
    entry = TaskHistory(
        user_id=user.id,
        task_id=1,
        title=title,
        priority="medium",
        created_at=completed_at - timedelta(days=1),
        completed_at=completed_at
    )
    db.add(entry)
    db.commit()
    return entry


def clear_fence(db, user):
    profile = db.query(Profile).filter(Profile.id == user.id).first()
    profile.history_started_at = None
    db.commit()


def test_history_respects_fence(db, user, make_habit, add_logs):
    habit = make_habit()
    add_logs(habit, ["completed", "missed", "completed", "completed"])
    add_history(db, user, "old", datetime(2024, 6, 10, 9, 0))
    add_history(db, user, "recent", datetime(2024, 6, 14, 9, 0))

    profile = db.query(Profile).filter(Profile.id == user.id).first()
    profile.history_started_at = datetime(2024, 6, 13, 0, 0)
    db.commit()

    rows, tasks, stats = get_history(db, user.id, today=TODAY)

    assert [log.date for log, _ in rows] == [TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=2)]
    assert [t.title for t in tasks] == ["recent"]
    assert stats.total == 3


def test_history_status_filter_and_stats(db, user, make_habit, add_logs):
    clear_fence(db, user)
    habit = make_habit()
    add_logs(habit, ["completed", "missed", "completed", "skipped"])

    rows, _, stats = get_history(db, user.id, status="completed", today=TODAY)

    assert all(log.status == "completed" for log, _ in rows)
    assert len(rows) == 2
    assert rows[0][1].title == "Drink Water"
    assert stats.completed == 2
    assert stats.missed == 1
    assert stats.total == 4
    assert stats.completion_rate == 50


def test_history_period_week(db, user, make_habit, add_logs):
    clear_fence(db, user)
    habit = make_habit()
    add_logs(habit, ["completed"] * 12)

    rows, _, _ = get_history(db, user.id, period="week", today=TODAY)

    assert len(rows) == 8  # aujourd'hui + 7 jours


def test_period_start():
    assert get_period_start("all", TODAY) is None
    assert get_period_start("week", TODAY) == TODAY - timedelta(days=7)
    assert get_period_start("month", TODAY) == TODAY.replace(month=5)


def test_stats_empty():
    stats = compute_history_stats([])
    assert stats.total == 0
    assert stats.completion_rate == 0


def test_history_endpoint(client, auth_headers, db, user, make_habit, add_logs):
    clear_fence(db, user)
    habit = make_habit()
    add_logs(habit, ["completed", "missed"], start=datetime.now().date())

    response = client.get("/history", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert len(data["habit_logs"]) == 2
    assert data["habit_logs"][0]["habit_title"] == "Drink Water"
    assert data["stats"]["completion_rate"] == 50


def test_history_invalid_period(client, auth_headers):
    assert client.get("/history?period=year", headers=auth_headers).status_code == 400


def test_delete_history_entry(client, auth_headers, db, user):
    entry = add_history(db, user, "done", datetime(2024, 6, 14, 9, 0))

    assert client.delete(f"/history/tasks/{entry.id}", headers=auth_headers).status_code == 204
    assert client.delete(f"/history/tasks/{entry.id}", headers=auth_headers).status_code == 404


def test_clear_history(client, auth_headers, db, user, make_habit, add_logs):
    habit = make_habit()
    add_logs(habit, ["completed", "missed"])
    add_history(db, user, "done", datetime(2024, 6, 14, 9, 0))

    response = client.delete("/history", headers=auth_headers)

    assert response.json() == {"deleted_task_history": 1, "deleted_habit_logs": 2}


def test_clear_history_rearms_celebration(client, auth_headers, make_habit, published):
    habit = make_habit()
    client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers)
    assert len([e for e in published if isinstance(e, FullCompletion)]) == 1

    client.delete("/history", headers=auth_headers)
    # le log du jour a disparu avec l'historique
    assert published[-1] == ProgressUpdated(0)

    client.post(f"/today/habits/{habit.id}/toggle", headers=auth_headers)

    assert len([e for e in published if isinstance(e, FullCompletion)]) == 2
