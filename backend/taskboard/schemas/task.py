"""Pydantic request/response contracts for personal and team tasks."""

from pydantic import BaseModel, Field, StrictBool, field_validator
from typing import List, Optional
from datetime import date, datetime
from taskboard.utils.helpers import MAX_ROW_ID


def _blank_to_none(value):
    if isinstance(value, str) and not value.strip():
        return None
    return value


class TaskCreate(BaseModel):
    task_name: Optional[str] = None
    due_date: Optional[date] = None
    description: Optional[str] = None
    team_id: Optional[int] = Field(None, ge=1, le=MAX_ROW_ID)

    _normalize_due_date = field_validator("due_date", mode="before")(_blank_to_none)


class TeamTaskCreate(TaskCreate):
    team_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    assigned_to: List[str] = []


class TaskStatusUpdate(BaseModel):
    task_name: str
    status: str


class TaskEdit(BaseModel):
    original_name: str
    new_name: Optional[str] = None
    due_date: Optional[date] = None
    description: Optional[str] = None

    _normalize_due_date = field_validator("due_date", mode="before")(_blank_to_none)


class TaskDelete(BaseModel):
    task_name: str


class AssigneeStatusUpdate(BaseModel):
    task_id: int = Field(..., ge=1, le=MAX_ROW_ID)
    assignee_email: str
    completed: StrictBool


class AssigneeOut(BaseModel):
    email: str
    name: str
    completed: bool

    model_config = {"from_attributes": True}


class TaskOut(BaseModel):
    id: int
    task_name: str
    status: str
    due_date: Optional[date] = None
    description: Optional[str] = None
    email: Optional[str] = None
    team_id: Optional[int] = None
    assigned_by: Optional[str] = None
    date_created: datetime
    date_completed: Optional[datetime] = None
    assigned_to: List[AssigneeOut] = []

    model_config = {"from_attributes": True}


class TaskListOut(BaseModel):
    tasks: List[TaskOut]


class CalendarDayOut(BaseModel):
    day: date
    tasks: List[TaskOut]


class CalendarOut(BaseModel):
    year: int
    month: int
    days: List[CalendarDayOut]


class TaskMutationOut(BaseModel):
    message: str
    task: TaskOut


class MessageOut(BaseModel):
    message: str
