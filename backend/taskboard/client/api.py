"""HTTP client for the task board API.

Thin wrapper over ``httpx.Client``; any client with the same interface (for
example FastAPI's ``TestClient``) can be passed in as ``http``.
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class ApiError(Exception):
    def __init__(self, status_code: int, detail: str):
        super().__init__(f"{status_code}: {detail}")
        self.status_code = status_code
        self.detail = detail


def _date_param(value: Optional[date | str]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat() if isinstance(value, date) else value


class TaskApiClient:
    def __init__(
        self,
        base_url: str = "",
        token: Optional[str] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ):
        self.token = token
        self._owns_http = http is None
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None, params=None) -> Dict[str, Any]:
        resp = self.http.request(method, path, json=json, params=params, headers=self._headers())
        if resp.status_code >= 400:
            try:
                detail = resp.json().get("detail", resp.text)
            except ValueError:
                detail = resp.text
            logger.debug("[client] %s %s -> %s %s", method, path, resp.status_code, detail)
            raise ApiError(resp.status_code, str(detail))
        return resp.json()

    # Personal tasks

    def list_tasks(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/tasks")["tasks"]

    def tasks_due_today(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/api/tasks/today")["tasks"]

    def create_task(self, task_name: str, due_date=None, description: Optional[str] = None) -> Dict[str, Any]:
        body = {"task_name": task_name, "due_date": _date_param(due_date), "description": description}
        return self._request("POST", "/api/tasks", json=body)["task"]

    def update_status(self, task_name: str, status: str) -> Dict[str, Any]:
        return self._request("PUT", "/api/tasks/update", json={"task_name": task_name, "status": status})["task"]

    def edit_task(self, original_name: str, **changes) -> Dict[str, Any]:
        body = {"original_name": original_name, **changes}
        if "due_date" in body:
            body["due_date"] = _date_param(body["due_date"])
        return self._request("PUT", "/api/tasks/edit", json=body)["task"]

    def delete_task(self, task_name: str) -> None:
        self._request("POST", "/api/tasks/delete", json={"task_name": task_name})

    def user_stats(self) -> Dict[str, int]:
        return self._request("GET", "/api/user-stats")

    # Teams

    def create_team(self, name: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/teams/create", json={"name": name, "password": password})

    def join_team(self, name: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/api/teams/join", json={"name": name, "password": password})

    def team_info(self, team_id: int) -> Dict[str, Any]:
        return self._request("GET", f"/api/teams/{team_id}")["team"]

    def team_members(self, team_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/teams/{team_id}/members")["members"]

    def list_team_tasks(self, team_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/teams/{team_id}/tasks")["tasks"]

    def create_team_task(
        self,
        team_id: int,
        task_name: str,
        assigned_to: Optional[List[str]] = None,
        due_date=None,
        description: Optional[str] = None,
    ) -> Dict[str, Any]:
        body = {
            "team_id": team_id,
            "task_name": task_name,
            "assigned_to": assigned_to or [],
            "due_date": _date_param(due_date),
            "description": description,
        }
        return self._request("POST", "/api/team-tasks", json=body)["task"]

    def update_team_task_status(self, team_id: int, task_name: str, status: str) -> Dict[str, Any]:
        body = {"task_name": task_name, "status": status}
        return self._request("PUT", f"/api/teams/{team_id}/tasks/update", json=body)["task"]

    def edit_team_task(self, team_id: int, original_name: str, **changes) -> Dict[str, Any]:
        body = {"original_name": original_name, **changes}
        if "due_date" in body:
            body["due_date"] = _date_param(body["due_date"])
        return self._request("PUT", f"/api/teams/{team_id}/tasks/edit", json=body)["task"]

    def delete_team_task(self, team_id: int, task_name: str) -> None:
        self._request("POST", f"/api/teams/{team_id}/tasks/delete", json={"task_name": task_name})

    def set_assignee_completed(self, team_id: int, task_id: int, assignee_email: str, completed: bool) -> Dict[str, Any]:
        body = {"task_id": task_id, "assignee_email": assignee_email, "completed": completed}
        return self._request("PUT", f"/api/teams/{team_id}/tasks/assignee-status", json=body)

    def team_activity(self, team_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/teams/{team_id}/activity")["logs"]

    def team_chat(self, team_id: int) -> List[Dict[str, Any]]:
        return self._request("GET", f"/api/teams/{team_id}/chat")["messages"]
