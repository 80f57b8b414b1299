"""UserStatistics model: a per-user status count cache rebuilt from the tasks table."""

from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy.sql import func
from taskboard.database import Base


class UserStatistics(Base):
    __tablename__ = "user_statistics"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(255), unique=True, nullable=False)
    incomplete = Column(Integer, nullable=False, default=0)
    in_progress = Column(Integer, nullable=False, default=0)
    complete = Column(Integer, nullable=False, default=0)
    overdue = Column(Integer, nullable=False, default=0)
    on_hold = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
