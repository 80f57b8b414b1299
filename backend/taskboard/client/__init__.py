"""Python client for the task board API and local board reconciliation."""

from taskboard.client.api import ApiError, TaskApiClient
from taskboard.client.board import BoardActionRejected, TaskBoard

__all__ = ["ApiError", "TaskApiClient", "BoardActionRejected", "TaskBoard"]
