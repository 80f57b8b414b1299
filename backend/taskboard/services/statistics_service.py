"""Per-user status counts.

``user_statistics`` is a cache derived from the personal rows of ``tasks``. It
can be recomputed for one user at any time, or for every user with
``rebuild_all``.
"""

import logging
from typing import Dict

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskboard.models.statistics import UserStatistics
from taskboard.models.task import Task, TASK_STATUSES

logger = logging.getLogger(__name__)


def empty_counts() -> Dict[str, int]:
    return {status: 0 for status in TASK_STATUSES}


def count_tasks(db: Session, email: str) -> Dict[str, int]:
    counts = empty_counts()
    rows = (
        db.query(Task.status, func.count(Task.id))
        .filter(Task.email == email, Task.team_id.is_(None))
        .group_by(Task.status)
        .all()
    )
    for status, total in rows:
        if status in counts:
            counts[status] = int(total)
    return counts


def _write_counts(db: Session, email: str, counts: Dict[str, int]) -> UserStatistics:
    stats = db.query(UserStatistics).filter(UserStatistics.email == email).first()
    if stats is None:
        stats = UserStatistics(email=email)
        db.add(stats)
    for status, total in counts.items():
        setattr(stats, status, total)
    db.commit()
    db.refresh(stats)
    return stats


def refresh_user_stats(db: Session, email: str) -> UserStatistics:
    counts = count_tasks(db, email)
    try:
        return _write_counts(db, email, counts)
    except IntegrityError:
        # A concurrent request inserted the row first; overwrite it instead.
        db.rollback()
        return _write_counts(db, email, counts)


def get_user_stats(db: Session, email: str) -> Dict[str, int]:
    stats = db.query(UserStatistics).filter(UserStatistics.email == email).first()
    if stats is None:
        return empty_counts()
    return {status: int(getattr(stats, status) or 0) for status in TASK_STATUSES}


def rebuild_all(db: Session) -> int:
    emails = {
        row[0]
        for row in db.query(Task.email).filter(Task.email.isnot(None), Task.team_id.is_(None)).distinct().all()
    }
    emails.update(row[0] for row in db.query(UserStatistics.email).all())
    for email in sorted(emails):
        refresh_user_stats(db, email)
    logger.info("[stats] rebuilt statistics for %d user(s)", len(emails))
    return len(emails)
