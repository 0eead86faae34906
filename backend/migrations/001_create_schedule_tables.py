from __future__ import annotations

"""Create the catalogue and schedule tables (and the dept/code lookup index).

Safe to run multiple times (create_all + IF NOT EXISTS).

Run:
  python backend/migrations/001_create_schedule_tables.py --yes
"""

import argparse
import sys
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import text

from core.bootstrap import ensure_schema
from core.database import ENGINE
from models import Base


def main() -> None:
    parser = argparse.ArgumentParser()
    parser.add_argument("--yes", action="store_true", help="Actually apply changes")
    args = parser.parse_args()

    statements = [
        "CREATE INDEX IF NOT EXISTS idx_schedule_sections_schedule_position ON schedule_sections (schedule_id, position);",
        "CREATE INDEX IF NOT EXISTS idx_user_schedules_user_active ON user_schedules (user_id, is_active);",
    ]

    if not args.yes:
        print("Dry run. Re-run with --yes to apply.")
        for table in Base.metadata.sorted_tables:
            print(f"--- table {table.name}")
        for s in statements:
            print("---")
            print(s.strip())
        return

    if not ensure_schema(ENGINE):
        raise SystemExit("Database unreachable")

    with ENGINE.begin() as conn:
        for s in statements:
            conn.execute(text(s))

    print(f"OK: created/verified {len(Base.metadata.sorted_tables)} tables and {len(statements)} indexes.")


if __name__ == "__main__":
    main()
