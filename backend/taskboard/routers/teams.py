"""Team membership API router: create, join and inspect teams."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from taskboard.database import get_db
from taskboard.schemas.team import (
    TeamCredentials,
    TeamDetailOut,
    TeamJoinResult,
    TeamListOut,
    TeamMemberListOut,
)
from taskboard.schemas.user import Identity
from taskboard.services import team_service
from taskboard.middleware.auth_middleware import get_current_user
from taskboard.utils.permissions import TeamIdPath

router = APIRouter(prefix="/api/teams", tags=["teams"])


@router.post("/create", response_model=TeamJoinResult, status_code=201)
def create_team(
    data: TeamCredentials,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    membership = team_service.create_team(db, data.name, data.password, current_user.email)
    return TeamJoinResult(message="Team created", teamId=membership.team_id, role=membership.role)


@router.post("/join", response_model=TeamJoinResult)
def join_team(
    data: TeamCredentials,
    db: Session = Depends(get_db),
    current_user: Identity = Depends(get_current_user),
):
    membership = team_service.join_team(db, data.name, data.password, current_user.email)
    return TeamJoinResult(message="Joined team", teamId=membership.team_id, role=membership.role)


@router.get("", response_model=TeamListOut)
def list_my_teams(db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"teams": team_service.list_my_teams(db, current_user.email)}


@router.get("/{team_id}", response_model=TeamDetailOut)
def get_team(team_id: TeamIdPath, db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"team": team_service.get_team_for_member(db, team_id, current_user.email)}


@router.get("/{team_id}/members", response_model=TeamMemberListOut)
def list_members(team_id: TeamIdPath, db: Session = Depends(get_db), current_user: Identity = Depends(get_current_user)):
    return {"members": team_service.list_members(db, team_id, current_user.email)}
