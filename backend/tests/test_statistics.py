"""Per-user statistics stay equal to the live per-status counts of personal tasks."""

from datetime import timedelta

from taskboard.models.statistics import UserStatistics
from taskboard.models.task import Task
from taskboard.services import statistics_service
from tests.conftest import auth_headers

OWNER = "a@x.com"


def _stats(client, email=OWNER):
    resp = client.get("/api/user-stats", headers=auth_headers(email))
    assert resp.status_code == 200
    return resp.json()


def _task_count(client, email=OWNER):
    return len(client.get("/api/tasks", headers=auth_headers(email)).json()["tasks"])


def test_new_user_has_zero_counts(client):
    assert _stats(client) == {"incomplete": 0, "in_progress": 0, "complete": 0, "overdue": 0, "on_hold": 0}


def test_counts_follow_every_mutation(client, today):
    headers = auth_headers(OWNER)
    client.post("/api/tasks", json={"task_name": "a"}, headers=headers)
    client.post("/api/tasks", json={"task_name": "b"}, headers=headers)
    client.post("/api/tasks", json={"task_name": "c", "due_date": (today - timedelta(days=1)).isoformat()}, headers=headers)

    stats = _stats(client)
    assert stats["incomplete"] == 2
    assert stats["overdue"] == 1
    assert sum(stats.values()) == _task_count(client)

    client.put("/api/tasks/update", json={"task_name": "a", "status": "complete"}, headers=headers)
    client.put("/api/tasks/update", json={"task_name": "b", "status": "on_hold"}, headers=headers)
    stats = _stats(client)
    assert stats == {"incomplete": 0, "in_progress": 0, "complete": 1, "overdue": 1, "on_hold": 1}

    client.post("/api/tasks/delete", json={"task_name": "a"}, headers=headers)
    stats = _stats(client)
    assert stats["complete"] == 0
    assert sum(stats.values()) == _task_count(client) == 2


def test_rescheduling_moves_count_out_of_overdue(client, today):
    headers = auth_headers(OWNER)
    client.post("/api/tasks", json={"task_name": "late", "due_date": (today - timedelta(days=1)).isoformat()}, headers=headers)
    assert _stats(client)["overdue"] == 1

    client.put(
        "/api/tasks/edit",
        json={"original_name": "late", "due_date": (today + timedelta(days=1)).isoformat()},
        headers=headers,
    )
    stats = _stats(client)
    assert stats["overdue"] == 0
    assert stats["incomplete"] == 1


def test_team_tasks_are_not_counted(client, seed_team):
    client.post(
        "/api/team-tasks",
        json={"task_name": "team job", "team_id": seed_team["id"], "assigned_to": []},
        headers=auth_headers(OWNER),
    )
    assert sum(_stats(client).values()) == 0


def test_rebuild_all_repairs_drifted_rows(db):
    db.add_all([
        Task(task_name="x", email="a@x.com", status="complete"),
        Task(task_name="y", email="a@x.com", status="incomplete"),
        Task(task_name="z", email="b@x.com", status="in_progress"),
    ])
    db.add(UserStatistics(email="a@x.com", incomplete=9, complete=9))
    db.add(UserStatistics(email="gone@x.com", incomplete=4))
    db.commit()

    assert statistics_service.rebuild_all(db) == 3
    assert statistics_service.get_user_stats(db, "a@x.com")["complete"] == 1
    assert statistics_service.get_user_stats(db, "a@x.com")["incomplete"] == 1
    assert statistics_service.get_user_stats(db, "b@x.com")["in_progress"] == 1
    assert sum(statistics_service.get_user_stats(db, "gone@x.com").values()) == 0


def test_refresh_creates_row_once(db):
    db.add(Task(task_name="x", email="a@x.com", status="complete"))
    db.commit()
    statistics_service.refresh_user_stats(db, "a@x.com")
    statistics_service.refresh_user_stats(db, "a@x.com")
    assert db.query(UserStatistics).filter(UserStatistics.email == "a@x.com").count() == 1
