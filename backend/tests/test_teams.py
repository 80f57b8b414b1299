"""Team creation, password-gated joining and membership lookups."""

from taskboard.models.team import Team, TeamMembership
from tests.conftest import ADMIN_EMAIL, MEMBER_EMAIL, OUTSIDER_EMAIL, TEAM_NAME, TEAM_PASSWORD, auth_headers


def _join(client, email, name=TEAM_NAME, password=TEAM_PASSWORD):
    return client.post("/api/teams/join", json={"name": name, "password": password}, headers=auth_headers(email))


def test_creator_becomes_admin(client, db):
    resp = client.post(
        "/api/teams/create",
        json={"name": "Rockets", "password": "pw"},
        headers=auth_headers(ADMIN_EMAIL),
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "Team created"
    assert body["role"] == "admin"

    team = db.query(Team).filter(Team.id == body["teamId"]).one()
    assert team.password_hash != "pw"
    membership = db.query(TeamMembership).filter(TeamMembership.team_id == team.id).one()
    assert membership.email == ADMIN_EMAIL
    assert membership.role == "admin"


def test_duplicate_team_name(client, seed_team):
    resp = client.post(
        "/api/teams/create",
        json={"name": TEAM_NAME, "password": "other"},
        headers=auth_headers(OUTSIDER_EMAIL),
    )
    assert resp.status_code == 409


def test_create_requires_name_and_password(client):
    resp = client.post("/api/teams/create", json={"name": "", "password": "pw"}, headers=auth_headers(ADMIN_EMAIL))
    assert resp.status_code == 400
    resp = client.post("/api/teams/create", json={"name": "Solo"}, headers=auth_headers(ADMIN_EMAIL))
    assert resp.status_code == 400
    resp = client.post("/api/teams/create", json={"name": "   ", "password": "pw"}, headers=auth_headers(ADMIN_EMAIL))
    assert resp.status_code == 400


def test_join_as_member(client, seed_team, db):
    resp = _join(client, OUTSIDER_EMAIL)
    assert resp.status_code == 200
    assert resp.json() == {"message": "Joined team", "teamId": seed_team["id"], "role": "member"}
    assert db.query(TeamMembership).filter(TeamMembership.team_id == seed_team["id"]).count() == 3


def test_wrong_password_adds_no_membership(client, seed_team, db):
    resp = _join(client, OUTSIDER_EMAIL, password="guess")
    assert resp.status_code == 401
    assert (
        db.query(TeamMembership)
        .filter(TeamMembership.team_id == seed_team["id"], TeamMembership.email == OUTSIDER_EMAIL)
        .count()
        == 0
    )


def test_join_unknown_team(client):
    resp = _join(client, OUTSIDER_EMAIL, name="Nobody")
    assert resp.status_code == 404


def test_join_twice_keeps_single_membership(client, seed_team, db):
    again = _join(client, MEMBER_EMAIL)
    assert again.status_code == 200
    assert again.json()["role"] == "member"
    assert (
        db.query(TeamMembership)
        .filter(TeamMembership.team_id == seed_team["id"], TeamMembership.email == MEMBER_EMAIL)
        .count()
        == 1
    )


def test_admin_rejoining_stays_admin(client, seed_team):
    resp = _join(client, ADMIN_EMAIL)
    assert resp.json()["role"] == "admin"


def test_list_my_teams(client, seed_team):
    resp = client.get("/api/teams", headers=auth_headers(MEMBER_EMAIL))
    assert resp.status_code == 200
    teams = resp.json()["teams"]
    assert [(t["id"], t["name"], t["role"]) for t in teams] == [(seed_team["id"], TEAM_NAME, "member")]

    resp = client.get("/api/teams", headers=auth_headers(OUTSIDER_EMAIL))
    assert resp.json()["teams"] == []


def test_team_detail_requires_membership(client, seed_team):
    resp = client.get(f"/api/teams/{seed_team['id']}", headers=auth_headers(ADMIN_EMAIL))
    assert resp.status_code == 200
    assert resp.json()["team"]["role"] == "admin"

    resp = client.get(f"/api/teams/{seed_team['id']}", headers=auth_headers(OUTSIDER_EMAIL))
    assert resp.status_code == 403

    resp = client.get("/api/teams/9999", headers=auth_headers(ADMIN_EMAIL))
    assert resp.status_code == 404

    for bad in ["0", "99999999999999999999"]:
        resp = client.get(f"/api/teams/{bad}", headers=auth_headers(ADMIN_EMAIL))
        assert resp.status_code == 400
        resp = client.get(f"/api/teams/{bad}/members", headers=auth_headers(ADMIN_EMAIL))
        assert resp.status_code == 400


def test_list_members(client, seed_team):
    resp = client.get(f"/api/teams/{seed_team['id']}/members", headers=auth_headers(MEMBER_EMAIL))
    assert resp.status_code == 200
    members = {m["email"]: m["role"] for m in resp.json()["members"]}
    assert members == {ADMIN_EMAIL: "admin", MEMBER_EMAIL: "member"}
