"""SQLAlchemy models for personal and team tasks."""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Boolean, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from taskboard.database import Base

INCOMPLETE = "incomplete"
IN_PROGRESS = "in_progress"
COMPLETE = "complete"
OVERDUE = "overdue"
ON_HOLD = "on_hold"

TASK_STATUSES = (INCOMPLETE, IN_PROGRESS, COMPLETE, OVERDUE, ON_HOLD)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), nullable=True)  # personal owner
    team_id = Column(Integer, ForeignKey("teams.id", ondelete="CASCADE"), nullable=True)
    task_name = Column(String(255), nullable=False)
    status = Column(String(20), nullable=False, default=INCOMPLETE)
    due_date = Column(Date)
    description = Column(Text)
    assigned_by = Column(String(255))  # team tasks only
    date_created = Column(DateTime, server_default=func.now(), nullable=False)
    date_completed = Column(DateTime)

    team = relationship("Team", back_populates="tasks")
    assignees = relationship(
        "TaskAssignee",
        back_populates="task",
        cascade="all, delete-orphan",
        order_by="TaskAssignee.id",
    )

    @property
    def assigned_to(self):
        return list(self.assignees)

    __table_args__ = (
        UniqueConstraint("email", "task_name", name="uq_task_owner_name"),
        UniqueConstraint("team_id", "task_name", name="uq_task_team_name"),
        Index("idx_task_email", "email", "date_created"),
        Index("idx_task_team", "team_id", "date_created"),
        Index("idx_task_due_date", "due_date"),
    )


class TaskAssignee(Base):
    __tablename__ = "task_assignees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False)
    email = Column(String(255), nullable=False)
    completed = Column(Boolean, nullable=False, default=False)

    task = relationship("Task", back_populates="assignees")

    @property
    def name(self):
        # Display names are not persisted; the email doubles as the label.
        return self.email

    __table_args__ = (
        UniqueConstraint("task_id", "email", name="uq_task_assignee"),
        Index("idx_task_assignee_email", "email"),
    )
