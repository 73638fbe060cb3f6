"""Periodic absence sweep.

Run from cron (e.g. hourly) so sessions that ended without attendance get an
'absent' record even when nobody opens the register.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from datetime import timedelta
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.attendance.backfill import sweep_scheduled_classes
from src.school_attendance.school_attendance.common.datetime_utils import now_local, parse_iso_date
from src.school_attendance.school_attendance.container import build_container


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Mark absences for scheduled sessions that have ended.")
    parser.add_argument("--days", type=int, default=7, help="How many days back to sweep (default: 7).")
    parser.add_argument("--start-date", type=parse_iso_date, help="Sweep from this date (YYYY-MM-DD); overrides --days.")
    parser.add_argument("--end-date", type=parse_iso_date, help="Sweep up to this date (default: today).")
    return parser


def main() -> None:
    args = _build_parser().parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    container = build_container(db_config=dict(settings.DB_CONFIG), timezone=settings.SCHOOL_TIMEZONE)
    today = now_local(container.school_tz).date()
    start_date = args.start_date or today - timedelta(days=args.days)

    created = sweep_scheduled_classes(
        container.backfill_service,
        container.schedule_resolver,
        start_date=start_date,
        end_date=args.end_date,
    )
    print(f"OK: swept {len(created)} classes from {start_date}, {sum(created.values())} absences recorded")


if __name__ == "__main__":
    main()
