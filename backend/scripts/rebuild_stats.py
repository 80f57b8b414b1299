"""Rebuild the user_statistics cache from the tasks table.

Usage:
  python scripts/rebuild_stats.py                 # every user
  python scripts/rebuild_stats.py --email a@x.com # one user
  python scripts/rebuild_stats.py --sweep         # run the overdue sweep first
"""
import argparse
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from taskboard.database import SessionLocal
import taskboard.models  # noqa: F401 - registers all models
from taskboard.models.task import Task
from taskboard.services import statistics_service, sweep_service


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--email", help="Only rebuild this user's row")
    parser.add_argument("--sweep", action="store_true", help="Mark overdue tasks before counting")
    args = parser.parse_args()

    db = SessionLocal()
    try:
        if args.sweep:
            emails = [args.email] if args.email else [
                row[0] for row in db.query(Task.email).filter(Task.email.isnot(None)).distinct().all()
            ]
            for email in emails:
                sweep_service.sweep_owner(db, email)
        if args.email:
            stats = statistics_service.refresh_user_stats(db, args.email)
            print(f"Rebuilt statistics for {stats.email}")
        else:
            total = statistics_service.rebuild_all(db)
            print(f"Rebuilt statistics for {total} user(s)")
    finally:
        db.close()


if __name__ == "__main__":
    main()
