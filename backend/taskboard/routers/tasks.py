"""Personal task API router. Validates requests and delegates to the task store."""

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session
from taskboard.database import get_db
from taskboard.schemas.task import (
    MessageOut,
    TaskCreate,
    TaskDelete,
    TaskEdit,
    TaskListOut,
    TaskMutationOut,
    TaskOut,
    TaskStatusUpdate,
    TeamTaskCreate,
)
from taskboard.schemas.user import Identity, UserStatsOut
from taskboard.services import activity_service, statistics_service, task_service, team_task_service
from taskboard.services.realtime_hub import BroadcastHub, NEW_ACTIVITY, get_hub
from taskboard.services.scope import OwnerScope
from taskboard.middleware.auth_middleware import get_current_user

router = APIRouter(prefix="/api", tags=["tasks"])


@router.post("/tasks", response_model=TaskMutationOut, status_code=201)
def create_task(
    data: TaskCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
    hub: BroadcastHub = Depends(get_hub),
):
    if data.team_id is not None:
        task, entry = team_task_service.create_team_task(db, TeamTaskCreate(**data.model_dump()), current_user)
        background_tasks.add_task(hub.emit, task.team_id, NEW_ACTIVITY, activity_service.to_event(entry, task.id))
    else:
        task = task_service.create_task(
            db,
            OwnerScope.personal(current_user.email),
            data.task_name,
            due_date=data.due_date,
            description=data.description,
        )
    return TaskMutationOut(message="Task created", task=TaskOut.model_validate(task))


@router.get("/tasks", response_model=TaskListOut)
def list_tasks(db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"tasks": task_service.list_tasks(db, OwnerScope.personal(current_user.email))}


@router.get("/tasks/today", response_model=TaskListOut)
def list_tasks_due_today(db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"tasks": task_service.list_due_today(db, OwnerScope.personal(current_user.email))}


@router.put("/tasks/update", response_model=TaskMutationOut)
def update_task_status(
    data: TaskStatusUpdate,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    task = task_service.update_status(db, OwnerScope.personal(current_user.email), data.task_name, data.status)
    return TaskMutationOut(message="Status updated", task=TaskOut.model_validate(task))


@router.put("/tasks/edit", response_model=TaskMutationOut)
def edit_task(
    data: TaskEdit,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    updates = data.model_dump(include=data.model_fields_set - {"original_name"})
    task = task_service.edit_task(db, OwnerScope.personal(current_user.email), data.original_name, updates)
    return TaskMutationOut(message="Task updated", task=TaskOut.model_validate(task))


@router.post("/tasks/delete", response_model=MessageOut)
def delete_task(
    data: TaskDelete,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    task_service.delete_task(db, OwnerScope.personal(current_user.email), data.task_name)
    return {"message": "Task deleted"}


@router.get("/user-stats", response_model=UserStatsOut)
def get_user_stats(db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return statistics_service.get_user_stats(db, current_user.email)
