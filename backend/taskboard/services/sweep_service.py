"""Overdue sweeper.

Marks every task in an owner scope as ``overdue`` once its due date is strictly
before today's date at the configured day boundary. The sweep is lazy: it runs
before task lists are returned and after every mutation, never on a timer.

Every non-overdue status is swept, ``complete`` and ``on_hold`` included. A swept
task loses its completion time along with its status.
"""

import logging

from sqlalchemy.orm import Session

from taskboard.models.task import Task, OVERDUE
from taskboard.services.scope import OwnerScope
from taskboard.utils import helpers

logger = logging.getLogger(__name__)


def sweep(db: Session, scope: OwnerScope) -> int:
    today = helpers.today_local()
    swept = (
        db.query(Task)
        .filter(
            *scope.criteria(),
            Task.due_date.isnot(None),
            Task.due_date < today,
            Task.status != OVERDUE,
        )
        .update({Task.status: OVERDUE, Task.date_completed: None}, synchronize_session=False)
    )
    db.commit()
    if swept:
        logger.info("[sweep] %s: %d task(s) marked overdue (today=%s)", scope, swept, today)
    return swept


def sweep_owner(db: Session, email: str) -> int:
    return sweep(db, OwnerScope.personal(email))


def sweep_team(db: Session, team_id: int) -> int:
    return sweep(db, OwnerScope.team(team_id))
