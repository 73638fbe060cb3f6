from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.school_attendance.school_attendance.database.bootstrap import apply_schema, list_tables


def main() -> None:
    parser = argparse.ArgumentParser(description="Create the school_attendance schema (idempotent).")
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    parser.add_argument("--list-tables", action="store_true", help="Print table names after applying.")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=args.schema)
    tables = list_tables(db_config)
    print(f"OK: {args.schema.name} applied to {db_config.get('database')} on {db_config.get('host')} ({len(tables)} tables)")
    if args.list_tables:
        for name in sorted(tables):
            print(f"  {name}")


if __name__ == "__main__":
    main()
