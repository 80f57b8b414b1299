"""Client board reconciliation: optimistic moves, rollbacks and idempotent event merging."""

import pytest

from taskboard.client import ApiError, BoardActionRejected, TaskApiClient, TaskBoard
from tests.conftest import ADMIN_EMAIL, MEMBER_EMAIL, make_token


class FakeApi:
    """In-memory stand-in for TaskApiClient that records calls."""

    def __init__(self, tasks=None, fail_with=None):
        self.tasks = {t["id"]: dict(t) for t in tasks or []}
        self.fail_with = fail_with
        self.calls = []
        self.activity = []
        self.messages = []

    def _maybe_fail(self):
        if self.fail_with:
            raise ApiError(*self.fail_with)

    def list_tasks(self):
        self.calls.append(("list_tasks",))
        return [dict(t) for t in self.tasks.values()]

    def list_team_tasks(self, team_id):
        self.calls.append(("list_team_tasks", team_id))
        return [dict(t) for t in self.tasks.values()]

    def team_activity(self, team_id):
        self.calls.append(("team_activity", team_id))
        return list(self.activity)

    def team_chat(self, team_id):
        self.calls.append(("team_chat", team_id))
        return list(self.messages)

    def _set_status(self, task_name, status):
        self._maybe_fail()
        task = next(t for t in self.tasks.values() if t["task_name"] == task_name)
        task["status"] = status
        return dict(task)

    def update_status(self, task_name, status):
        self.calls.append(("update_status", task_name, status))
        return self._set_status(task_name, status)

    def update_team_task_status(self, team_id, task_name, status):
        self.calls.append(("update_team_task_status", team_id, task_name, status))
        return self._set_status(task_name, status)

    def set_assignee_completed(self, team_id, task_id, email, completed):
        self.calls.append(("set_assignee_completed", team_id, task_id, email, completed))
        self._maybe_fail()
        return {"completed": completed}


def _task(id, name, status="incomplete", assignees=()):
    return {
        "id": id,
        "task_name": name,
        "status": status,
        "date_created": f"2025-01-0{id}T10:00:00",
        "assigned_to": [{"email": e, "name": e, "completed": False} for e in assignees],
    }


def test_refresh_and_lanes():
    api = FakeApi([_task(1, "old"), _task(2, "new", status="complete")])
    board = TaskBoard(api, ADMIN_EMAIL)
    board.refresh()
    lanes = board.lanes()
    assert [t["task_name"] for t in lanes["incomplete"]] == ["old"]
    assert [t["task_name"] for t in lanes["complete"]] == ["new"]
    assert lanes["overdue"] == []


def test_successful_move():
    api = FakeApi([_task(1, "a")])
    board = TaskBoard(api, ADMIN_EMAIL)
    board.refresh()
    assert board.move(1, "in_progress") is True
    assert board.get(1)["status"] == "in_progress"
    assert ("update_status", "a", "in_progress") in api.calls


def test_rejected_move_rolls_back():
    api = FakeApi([_task(1, "a")], fail_with=(400, "Invalid status"))
    board = TaskBoard(api, ADMIN_EMAIL)
    board.refresh()
    assert board.move(1, "complete") is False
    assert board.get(1)["status"] == "incomplete"
    assert board.last_error.status_code == 400


def test_overdue_lane_is_not_a_drop_target():
    api = FakeApi([_task(1, "a")])
    board = TaskBoard(api, ADMIN_EMAIL)
    board.refresh()
    assert not board.can_move("overdue")
    with pytest.raises(BoardActionRejected):
        board.move(1, "overdue")
    assert not any(call[0] == "update_status" for call in api.calls)


def test_same_lane_drop_sends_nothing():
    api = FakeApi([_task(1, "a")])
    board = TaskBoard(api, ADMIN_EMAIL)
    board.refresh()
    assert board.move(1, "incomplete") is True
    assert not any(call[0] == "update_status" for call in api.calls)


def test_team_member_cannot_move():
    api = FakeApi([_task(1, "a")])
    board = TaskBoard(api, MEMBER_EMAIL, team_id=5, is_admin=False)
    board.refresh()
    assert not board.can_move("complete")
    with pytest.raises(BoardActionRejected):
        board.move(1, "complete")


def test_assignee_toggle_only_for_own_row():
    api = FakeApi([_task(1, "a", assignees=[MEMBER_EMAIL, ADMIN_EMAIL])])
    board = TaskBoard(api, MEMBER_EMAIL, team_id=5)
    board.refresh()
    assert board.can_toggle_assignee(1, MEMBER_EMAIL)
    assert not board.can_toggle_assignee(1, ADMIN_EMAIL)

    assert board.toggle_assignee(1, True) is True
    rows = {a["email"]: a["completed"] for a in board.get(1)["assigned_to"]}
    assert rows == {MEMBER_EMAIL: True, ADMIN_EMAIL: False}


def test_failed_toggle_rolls_back():
    api = FakeApi([_task(1, "a", assignees=[MEMBER_EMAIL])], fail_with=(403, "nope"))
    board = TaskBoard(api, MEMBER_EMAIL, team_id=5)
    board.refresh()
    assert board.toggle_assignee(1, True) is False
    assert board.get(1)["assigned_to"][0]["completed"] is False


def test_events_merge_idempotently():
    api = FakeApi([_task(1, "a", assignees=[MEMBER_EMAIL])])
    board = TaskBoard(api, ADMIN_EMAIL, team_id=5, is_admin=True)
    board.refresh()

    update = {"team_id": 5, "task_id": 1, "assignee_email": MEMBER_EMAIL, "completed": True}
    board.apply_event("assignee_status_updated", update)
    board.apply_event("assignee_status_updated", update)
    assert board.get(1)["assigned_to"][0]["completed"] is True

    message = {"id": 9, "team_id": 5, "sender_email": MEMBER_EMAIL, "message": "hi"}
    board.apply_event("new_message", message)
    board.apply_event("new_message", message)
    assert board.messages == [message]


def test_load_chat_then_merge_live_messages():
    api = FakeApi()
    history = {"id": 3, "team_id": 5, "sender_email": ADMIN_EMAIL, "message": "morning"}
    api.messages = [history]
    board = TaskBoard(api, MEMBER_EMAIL, team_id=5)
    board.load_chat()
    assert board.messages == [history]
    assert ("team_chat", 5) in api.calls

    # A broadcast of a message already in the history is not added twice.
    board.apply_event("new_message", history)
    fresh = {"id": 4, "team_id": 5, "sender_email": MEMBER_EMAIL, "message": "hi"}
    board.apply_event("new_message", fresh)
    assert board.messages == [history, fresh]


def test_personal_board_has_no_chat():
    api = FakeApi()
    api.messages = [{"id": 1, "message": "not mine"}]
    board = TaskBoard(api, MEMBER_EMAIL)
    board.load_chat()
    assert board.messages == []
    assert api.calls == []


def test_activity_event_refetches():
    api = FakeApi([_task(1, "a")])
    board = TaskBoard(api, ADMIN_EMAIL, team_id=5, is_admin=True)
    board.refresh()
    api.tasks[2] = _task(2, "b")
    api.activity = [{"id": 1, "action": "created_task", "target": "b"}]

    board.apply_event("new_activity", {"id": 1, "task_id": 2})
    assert set(board.tasks) == {1, 2}
    assert board.activity == api.activity


def test_board_against_live_api(client, seed_team):
    team_id = seed_team["id"]
    admin_api = TaskApiClient(http=client, token=make_token(ADMIN_EMAIL))
    member_api = TaskApiClient(http=client, token=make_token(MEMBER_EMAIL))
    admin_api.create_team_task(team_id, "Deploy", assigned_to=[MEMBER_EMAIL])

    admin_board = TaskBoard(admin_api, ADMIN_EMAIL, team_id=team_id, is_admin=True)
    member_board = TaskBoard(member_api, MEMBER_EMAIL, team_id=team_id)
    admin_board.refresh()
    member_board.refresh()
    (task_id,) = admin_board.tasks

    assert admin_board.move(task_id, "complete") is True
    member_board.apply_event("new_activity", {"task_id": task_id})
    assert member_board.get(task_id)["status"] == "complete"
    assert member_board.activity[0]["action"] == "updated_task_status"

    assert member_board.toggle_assignee(task_id, True) is True
    admin_board.refresh()
    assert admin_board.get(task_id)["assigned_to"][0]["completed"] is True


def test_api_errors_carry_status_and_detail(client):
    api = TaskApiClient(http=client, token=make_token(ADMIN_EMAIL))
    api.create_task("once")
    with pytest.raises(ApiError) as excinfo:
        api.create_task("once")
    assert excinfo.value.status_code == 409
    assert "already exists" in excinfo.value.detail

    anonymous = TaskApiClient(http=client)
    with pytest.raises(ApiError) as excinfo:
        anonymous.list_tasks()
    assert excinfo.value.status_code == 401
