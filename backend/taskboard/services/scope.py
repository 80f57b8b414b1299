"""Owner scope: the personal task set of one email or the shared task set of one team."""

from dataclasses import dataclass
from typing import Optional

from taskboard.models.task import Task


@dataclass(frozen=True)
class OwnerScope:
    email: Optional[str] = None
    team_id: Optional[int] = None

    @classmethod
    def personal(cls, email: str) -> "OwnerScope":
        return cls(email=email)

    @classmethod
    def team(cls, team_id: int) -> "OwnerScope":
        return cls(team_id=team_id)

    @property
    def is_team(self) -> bool:
        return self.team_id is not None

    def criteria(self) -> list:
        if self.is_team:
            return [Task.team_id == self.team_id]
        return [Task.email == self.email, Task.team_id.is_(None)]

    def owner_fields(self) -> dict:
        if self.is_team:
            return {"team_id": self.team_id, "email": None}
        return {"email": self.email, "team_id": None}

    def __str__(self) -> str:
        return f"team:{self.team_id}" if self.is_team else f"user:{self.email}"
