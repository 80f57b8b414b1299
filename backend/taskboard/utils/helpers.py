from datetime import date, datetime
from zoneinfo import ZoneInfo

from taskboard.config import settings

# Largest value an INTEGER primary key column can hold.
MAX_ROW_ID = 2**63 - 1


def local_now() -> datetime:
    return datetime.now(ZoneInfo(settings.TASK_TIMEZONE))


def today_local() -> date:
    """Calendar date at the configured day boundary (America/Toronto by default)."""
    return local_now().date()


def normalize_email(value: str | None) -> str:
    return (value or "").strip()


def month_bounds(year: int, month: int) -> tuple[date, date]:
    """First day of the month and first day of the following month."""
    start = date(year, month, 1)
    if month == 12:
        return start, date(year + 1, 1, 1)
    return start, date(year, month + 1, 1)
