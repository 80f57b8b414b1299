"""Team board API router: team tasks, assignee progress, chat history, activity feed and calendar.

Mutations answer first and broadcast to the team room afterwards through
background tasks, so a slow or broken socket never holds up the response.
"""

from collections import OrderedDict

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session
from taskboard.database import get_db
from taskboard.models.team import ActivityLogEntry
from taskboard.schemas.task import (
    AssigneeStatusUpdate,
    CalendarOut,
    MessageOut,
    TaskDelete,
    TaskEdit,
    TaskListOut,
    TaskMutationOut,
    TaskOut,
    TaskStatusUpdate,
    TeamTaskCreate,
)
from taskboard.schemas.team import ActivityFeedOut, ChatHistoryOut, ChatMessageCreate, ChatMessageOut
from taskboard.schemas.user import Identity
from taskboard.services import activity_service, chat_service, task_service, team_task_service
from taskboard.services.realtime_hub import (
    ASSIGNEE_STATUS_UPDATED,
    NEW_ACTIVITY,
    NEW_MESSAGE,
    BroadcastHub,
    get_hub,
)
from taskboard.services.scope import OwnerScope
from taskboard.middleware.auth_middleware import get_current_user
from taskboard.utils import helpers
from taskboard.utils.permissions import TeamIdPath, get_team_or_404, require_membership

router = APIRouter(prefix="/api", tags=["team-tasks"])


def _broadcast_activity(
    background_tasks: BackgroundTasks,
    hub: BroadcastHub,
    entry: ActivityLogEntry,
    task_id: int | None = None,
):
    background_tasks.add_task(hub.emit, entry.team_id, NEW_ACTIVITY, activity_service.to_event(entry, task_id))


@router.post("/team-tasks", response_model=TaskMutationOut, status_code=201)
def create_team_task(
    data: TeamTaskCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    task, entry = team_task_service.create_team_task(db, data, current_user)
    _broadcast_activity(background_tasks, hub, entry, task.id)
    return TaskMutationOut(message="Task created", task=TaskOut.model_validate(task))


@router.get("/teams/{team_id}/tasks", response_model=TaskListOut)
def list_team_tasks(team_id: TeamIdPath, db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"tasks": team_task_service.list_team_tasks(db, team_id, current_user)}


@router.put("/teams/{team_id}/tasks/update", response_model=TaskMutationOut)
def update_team_task_status(
    team_id: TeamIdPath,
    data: TaskStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    task, entry = team_task_service.update_team_task_status(db, team_id, data, current_user)
    _broadcast_activity(background_tasks, hub, entry, task.id)
    return TaskMutationOut(message="Status updated", task=TaskOut.model_validate(task))


@router.put("/teams/{team_id}/tasks/edit", response_model=TaskMutationOut)
def edit_team_task(
    team_id: TeamIdPath,
    data: TaskEdit,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    task, entry = team_task_service.edit_team_task(db, team_id, data, current_user)
    _broadcast_activity(background_tasks, hub, entry, task.id)
    return TaskMutationOut(message="Task updated", task=TaskOut.model_validate(task))


@router.post("/teams/{team_id}/tasks/delete", response_model=MessageOut)
def delete_team_task(
    team_id: TeamIdPath,
    data: TaskDelete,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    deleted, entry = team_task_service.delete_team_task(db, team_id, data.task_name, current_user)
    _broadcast_activity(background_tasks, hub, entry, deleted["id"])
    return {"message": "Task deleted"}


@router.put("/teams/{team_id}/tasks/assignee-status")
def update_assignee_status(
    team_id: TeamIdPath,
    data: AssigneeStatusUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    payload = team_task_service.update_assignee_status(db, team_id, data, current_user)
    background_tasks.add_task(hub.emit, team_id, ASSIGNEE_STATUS_UPDATED, payload)
    return {"message": "Assignee status updated", **payload}


@router.get("/teams/{team_id}/calendar", response_model=CalendarOut)
def team_calendar(
    team_id: TeamIdPath,
    year: int | None = Query(None, ge=1970, le=9999),
    month: int | None = Query(None, ge=1, le=12),
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    require_membership(db, team_id, current_user.email)
    today = helpers.today_local()
    year = year or today.year
    month = month or today.month
    start, end = helpers.month_bounds(year, month)

    days = OrderedDict()
    for task in task_service.list_between(db, OwnerScope.team(team_id), start, end):
        days.setdefault(task.due_date, []).append(task)
    return {
        "year": year,
        "month": month,
        "days": [{"day": day, "tasks": tasks} for day, tasks in days.items()],
    }


@router.get("/teams/{team_id}/chat", response_model=ChatHistoryOut)
def chat_history(team_id: TeamIdPath, db: Session = Depends(get_db)):
    get_team_or_404(db, team_id)
    return {"messages": chat_service.list_messages(db, team_id)}


@router.post("/teams/{team_id}/chat", response_model=ChatMessageOut, status_code=201)
def post_chat_message(
    team_id: TeamIdPath,
    data: ChatMessageCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    chat = chat_service.post_message(db, team_id, current_user.email, data.message)
    background_tasks.add_task(hub.emit, team_id, NEW_MESSAGE, chat_service.to_event(chat))
    return chat


@router.get("/teams/{team_id}/activity", response_model=ActivityFeedOut)
def activity_feed(team_id: TeamIdPath, db: Session = Depends(get_db)):
    get_team_or_404(db, team_id)
    return {"logs": activity_service.list_recent(db, team_id)}
