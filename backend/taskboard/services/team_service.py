"""Team membership service: password-gated team creation and joining, team lookups."""

import logging
from typing import List

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from taskboard.config import settings
from taskboard.models.team import Team, TeamMembership, ADMIN, MEMBER
from taskboard.utils.permissions import get_membership, require_membership

logger = logging.getLogger(__name__)


def hash_team_password(password: str) -> str:
    return generate_password_hash(password, method=settings.TEAM_PASSWORD_HASH_METHOD)


def create_team(db: Session, name: str, password: str, creator_email: str) -> TeamMembership:
    name = name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="Team name is required")

    # Uniqueness is left to the database constraint so concurrent creates cannot both win.
    team = Team(name=name, password_hash=hash_team_password(password))
    membership = TeamMembership(team=team, email=creator_email, role=ADMIN)
    db.add(team)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Team name already exists")
    db.refresh(membership)
    logger.info("[teams] %s created team '%s' (id=%s)", creator_email, name, team.id)
    return membership


def join_team(db: Session, name: str, password: str, email: str) -> TeamMembership:
    team = db.query(Team).filter(Team.name == name.strip()).first()
    if not team:
        raise HTTPException(status_code=404, detail="Team not found")
    if not check_password_hash(team.password_hash, password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Incorrect team password")

    existing = get_membership(db, team.id, email)
    if existing:
        return existing

    membership = TeamMembership(team_id=team.id, email=email, role=MEMBER)
    db.add(membership)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return get_membership(db, team.id, email)
    db.refresh(membership)
    logger.info("[teams] %s joined team '%s' (id=%s)", email, team.name, team.id)
    return membership


def _summary(membership: TeamMembership) -> dict:
    return {
        "id": membership.team.id,
        "name": membership.team.name,
        "role": membership.role,
        "created_at": membership.team.created_at,
    }


def list_my_teams(db: Session, email: str) -> List[dict]:
    memberships = (
        db.query(TeamMembership)
        .join(Team, Team.id == TeamMembership.team_id)
        .filter(TeamMembership.email == email)
        .order_by(Team.created_at.desc(), Team.id.desc())
        .all()
    )
    return [_summary(m) for m in memberships]


def get_team_for_member(db: Session, team_id: int, email: str) -> dict:
    return _summary(require_membership(db, team_id, email))


def list_members(db: Session, team_id: int, email: str) -> List[dict]:
    require_membership(db, team_id, email)
    memberships = (
        db.query(TeamMembership)
        .filter(TeamMembership.team_id == team_id)
        .order_by(TeamMembership.joined_at, TeamMembership.id)
        .all()
    )
    return [
        {"email": m.email, "name": m.email, "role": m.role, "joined_at": m.joined_at}
        for m in memberships
    ]
