"""SQLAlchemy models for teams, memberships, chat and the activity log."""

from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskboard.database import Base

ADMIN = "admin"
MEMBER = "member"


class Team(Base):
    __tablename__ = "teams"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), unique=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    memberships = relationship("TeamMembership", back_populates="team", cascade="all, delete-orphan")
    tasks = relationship("Task", back_populates="team", cascade="all, delete-orphan")
    messages = relationship("ChatMessage", back_populates="team", cascade="all, delete-orphan")
    activity = relationship("ActivityLogEntry", back_populates="team", cascade="all, delete-orphan")


class TeamMembership(Base):
    __tablename__ = "team_memberships"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    email = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=MEMBER)  # admin/member
    joined_at = Column(DateTime, server_default=func.now(), nullable=False)

    team = relationship("Team", back_populates="memberships")

    __table_args__ = (
        UniqueConstraint("team_id", "email", name="uq_team_membership"),
        Index("idx_team_membership_email", "email"),
    )


class ChatMessage(Base):
    __tablename__ = "team_chat"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    sender_email = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    sent_at = Column(DateTime, server_default=func.now(), nullable=False)

    team = relationship("Team", back_populates="messages")

    __table_args__ = (
        Index("idx_team_chat_team", "team_id", "sent_at"),
    )


class ActivityLogEntry(Base):
    __tablename__ = "team_activity_log"

    id = Column(Integer, primary_key=True, autoincrement=True)
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=False)
    actor_email = Column(String(255), nullable=False)
    action = Column(String(30), nullable=False)  # created_task/edited_task/updated_task_status/deleted_task
    target = Column(String(255), nullable=False)
    destination = Column(String(20))
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    team = relationship("Team", back_populates="activity")

    __table_args__ = (
        Index("idx_team_activity_team", "team_id", "created_at"),
    )
