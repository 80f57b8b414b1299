"""Client-side task board state with optimistic updates.

A board keeps the tasks of one owner scope keyed by their numeric id. Status
moves are applied locally first and then confirmed or rolled back from the
server's answer; broadcast events are merged idempotently, so replaying an
event that describes the current state changes nothing.
"""

import logging
from typing import Any, Dict, List, Optional

from taskboard.client.api import ApiError, TaskApiClient

logger = logging.getLogger(__name__)

STATUSES = ("incomplete", "in_progress", "complete", "overdue", "on_hold")
OVERDUE = "overdue"


class BoardActionRejected(Exception):
    """Raised when a move is refused locally, before any request is sent."""


class TaskBoard:
    def __init__(
        self,
        api: TaskApiClient,
        viewer_email: str,
        team_id: Optional[int] = None,
        is_admin: bool = False,
    ):
        self.api = api
        self.viewer_email = viewer_email
        self.team_id = team_id
        self.is_admin = is_admin
        self.tasks: Dict[int, Dict[str, Any]] = {}
        self.activity: List[Dict[str, Any]] = []
        self.messages: List[Dict[str, Any]] = []
        self.last_error: Optional[ApiError] = None

    @property
    def is_team(self) -> bool:
        return self.team_id is not None

    # Loading

    def refresh(self) -> None:
        if self.is_team:
            fetched = self.api.list_team_tasks(self.team_id)
        else:
            fetched = self.api.list_tasks()
        self.tasks = {task["id"]: task for task in fetched}

    def refresh_activity(self) -> None:
        if self.is_team:
            self.activity = self.api.team_activity(self.team_id)

    def load_chat(self) -> None:
        if self.is_team:
            self.messages = self.api.team_chat(self.team_id)

    def lanes(self) -> Dict[str, List[Dict[str, Any]]]:
        ordered = sorted(self.tasks.values(), key=lambda t: (t.get("date_created") or "", t["id"]), reverse=True)
        return {status: [t for t in ordered if t["status"] == status] for status in STATUSES}

    def get(self, task_id: int) -> Dict[str, Any]:
        return self.tasks[task_id]

    # Status moves

    def can_move(self, new_status: str) -> bool:
        if new_status not in STATUSES or new_status == OVERDUE:
            return False
        return not self.is_team or self.is_admin

    def move(self, task_id: int, new_status: str) -> bool:
        """Drop a task into ``new_status``. Returns False if the server refused it."""
        if new_status == OVERDUE:
            raise BoardActionRejected("Tasks become overdue automatically and cannot be moved there")
        if new_status not in STATUSES:
            raise BoardActionRejected(f"Unknown status: {new_status}")
        if self.is_team and not self.is_admin:
            raise BoardActionRejected("Only team admins can move team tasks")

        task = self.tasks[task_id]
        previous = task["status"]
        if previous == new_status:
            return True

        task["status"] = new_status
        try:
            if self.is_team:
                confirmed = self.api.update_team_task_status(self.team_id, task["task_name"], new_status)
            else:
                confirmed = self.api.update_status(task["task_name"], new_status)
        except ApiError as exc:
            logger.warning("[board] move of task %s to %s failed: %s", task_id, new_status, exc.detail)
            task["status"] = previous
            self.last_error = exc
            return False

        self.merge_task(confirmed)
        return True

    def merge_task(self, incoming: Dict[str, Any]) -> None:
        current = self.tasks.get(incoming["id"])
        if current is None:
            self.tasks[incoming["id"]] = dict(incoming)
            return
        for key, value in incoming.items():
            if current.get(key) != value:
                current[key] = value

    # Assignee checkboxes

    def can_toggle_assignee(self, task_id: int, assignee_email: str) -> bool:
        task = self.tasks.get(task_id)
        if not self.is_team or task is None:
            return False
        is_assignee = any(a["email"] == assignee_email for a in task.get("assigned_to", []))
        return is_assignee and assignee_email == self.viewer_email

    def toggle_assignee(self, task_id: int, completed: bool) -> bool:
        if not self.can_toggle_assignee(task_id, self.viewer_email):
            raise BoardActionRejected("You can only update your own completion status")
        previous = self._set_assignee_completed(task_id, self.viewer_email, completed)
        try:
            self.api.set_assignee_completed(self.team_id, task_id, self.viewer_email, completed)
        except ApiError as exc:
            self._set_assignee_completed(task_id, self.viewer_email, previous)
            self.last_error = exc
            return False
        return True

    def _set_assignee_completed(self, task_id: int, email: str, completed: bool) -> Optional[bool]:
        task = self.tasks.get(task_id)
        if task is None:
            return None
        previous = None
        for assignee in task.get("assigned_to", []):
            if assignee["email"] == email:
                previous = assignee["completed"]
                assignee["completed"] = completed
        return previous

    # Broadcast events

    def apply_event(self, event: str, data: Dict[str, Any]) -> None:
        if event == "new_activity":
            # The payload is a hint; the task list and feed are re-fetched.
            self.refresh()
            self.refresh_activity()
        elif event == "assignee_status_updated":
            self._set_assignee_completed(data["task_id"], data["assignee_email"], data["completed"])
        elif event == "new_message":
            if not any(m.get("id") == data.get("id") for m in self.messages if m.get("id") is not None):
                self.messages.append(data)
        else:
            logger.debug("[board] ignoring event %s", event)
