from datetime import timedelta

from tests.conftest import auth_headers, make_token


def test_health(client):
    resp = client.get("/api/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_valid_token_is_accepted(client):
    resp = client.get("/api/tasks", headers=auth_headers("a@x.com"))
    assert resp.status_code == 200
    assert resp.json() == {"tasks": []}


def test_missing_token(client):
    resp = client.get("/api/tasks")
    assert resp.status_code == 401


def test_malformed_token(client):
    resp = client.get("/api/tasks", headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


def test_expired_token(client):
    token = make_token("a@x.com", expires_in=timedelta(minutes=-5))
    resp = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_signed_with_other_secret(client):
    token = make_token("a@x.com", secret="someone-else")
    resp = client.get("/api/tasks", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_token_without_email(client):
    token = make_token(None)
    resp = client.get("/api/user-stats", headers={"Authorization": f"Bearer {token}"})
    assert resp.status_code == 401


def test_unauthenticated_mutation_has_no_side_effects(client):
    resp = client.post("/api/tasks", json={"task_name": "Ghost"})
    assert resp.status_code == 401
    listed = client.get("/api/tasks", headers=auth_headers("a@x.com"))
    assert listed.json()["tasks"] == []
