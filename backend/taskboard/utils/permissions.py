"""Team membership and role checks shared by the team services."""

from typing import Annotated

from fastapi import HTTPException, Path
from sqlalchemy.orm import Session

from taskboard.models.team import Team, TeamMembership, ADMIN
from taskboard.utils.helpers import MAX_ROW_ID

TeamIdPath = Annotated[int, Path(ge=1, le=MAX_ROW_ID)]


def get_team_or_404(db: Session, team_id: int) -> Team:
    team = db.query(Team).filter(Team.id == team_id).first()
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    return team


def get_membership(db: Session, team_id: int, email: str) -> TeamMembership | None:
    return db.query(TeamMembership).filter(
        TeamMembership.team_id == team_id,
        TeamMembership.email == email,
    ).first()


def is_team_member(db: Session, team_id: int, email: str) -> bool:
    return get_membership(db, team_id, email) is not None


def is_team_admin(membership: TeamMembership | None) -> bool:
    return membership is not None and membership.role == ADMIN


def require_membership(db: Session, team_id: int, email: str) -> TeamMembership:
    get_team_or_404(db, team_id)
    membership = get_membership(db, team_id, email)
    if membership is None:
        raise HTTPException(status_code=403, detail="You are not a member of this team")
    return membership


def require_team_admin(db: Session, team_id: int, email: str) -> TeamMembership:
    membership = require_membership(db, team_id, email)
    if not is_team_admin(membership):
        raise HTTPException(status_code=403, detail="Only team admins can manage team tasks")
    return membership
