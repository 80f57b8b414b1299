"""Service layer package."""

from taskboard.services import (
    activity_service,
    chat_service,
    statistics_service,
    sweep_service,
    task_service,
    team_service,
    team_task_service,
)
