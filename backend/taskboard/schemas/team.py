"""Pydantic contracts for teams, memberships, chat and the activity feed."""

from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


class TeamCredentials(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    password: str = Field(..., min_length=1)


class TeamJoinResult(BaseModel):
    message: str
    teamId: int
    role: str


class TeamSummaryOut(BaseModel):
    id: int
    name: str
    role: str
    created_at: datetime


class TeamListOut(BaseModel):
    teams: List[TeamSummaryOut]


class TeamDetailOut(BaseModel):
    team: TeamSummaryOut


class TeamMemberOut(BaseModel):
    email: str
    name: str
    role: str
    joined_at: datetime


class TeamMemberListOut(BaseModel):
    members: List[TeamMemberOut]


class ChatMessageCreate(BaseModel):
    message: str = Field(..., min_length=1, max_length=4000)


class ChatMessageOut(BaseModel):
    id: int
    team_id: int
    sender_email: str
    message: str
    sent_at: datetime

    model_config = {"from_attributes": True}


class ChatHistoryOut(BaseModel):
    messages: List[ChatMessageOut]


class ActivityLogOut(BaseModel):
    id: int
    team_id: int
    actor_email: str
    action: str
    target: str
    destination: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ActivityFeedOut(BaseModel):
    logs: List[ActivityLogOut]
