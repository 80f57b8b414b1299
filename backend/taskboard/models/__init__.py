"""SQLAlchemy model package."""

from taskboard.models.team import Team, TeamMembership, ChatMessage, ActivityLogEntry
from taskboard.models.task import Task, TaskAssignee
from taskboard.models.statistics import UserStatistics

__all__ = [
    "Team", "TeamMembership", "ChatMessage", "ActivityLogEntry",
    "Task", "TaskAssignee",
    "UserStatistics",
]
