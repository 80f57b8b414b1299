"""Create the task board tables.

Usage:
  python scripts/init_db.py           # create missing tables
  python scripts/init_db.py --reset   # drop and recreate every table
"""
import argparse
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from taskboard.config import settings
from taskboard.database import engine, Base
from taskboard.logging_setup import configure_logging
import taskboard.models  # noqa: F401 - registers all models

logger = logging.getLogger("taskboard.init_db")


def init_db(reset: bool = False) -> list[str]:
    if reset:
        logger.warning("[db] dropping all tables in %s", settings.DATABASE_URL)
        Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    tables = sorted(Base.metadata.tables)
    logger.info("[db] ready: %s", ", ".join(tables))
    return tables


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--reset", action="store_true", help="Drop existing tables first")
    args = parser.parse_args()
    configure_logging()
    init_db(reset=args.reset)


if __name__ == "__main__":
    main()
