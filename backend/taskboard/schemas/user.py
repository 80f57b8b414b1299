"""Identity and per-user statistics contracts."""

from pydantic import BaseModel
from typing import Optional


class Identity(BaseModel):
    """Claims carried by the login service's identity token."""

    email: str
    id: Optional[str] = None
    name: Optional[str] = None


class UserStatsOut(BaseModel):
    incomplete: int = 0
    in_progress: int = 0
    complete: int = 0
    overdue: int = 0
    on_hold: int = 0

    model_config = {"from_attributes": True}
