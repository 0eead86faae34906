from __future__ import annotations

"""Print row counts for the catalogue and schedule tables.

Run:
  python backend/migrations/inspect_counts.py [--user USER_ID]
"""

import argparse
import os
from pathlib import Path

import psycopg2


def _load_env_file(env_path: Path) -> None:
    if not env_path.exists():
        return
    for raw in env_path.read_text(encoding="utf-8").splitlines():
        line = raw.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        k, v = line.split("=", 1)
        os.environ.setdefault(k.strip(), v.strip().strip('"').strip("'"))


def _psycopg_conninfo(url: str) -> str:
    url = url.strip()
    for prefix in ("postgresql+psycopg2://", "postgresql+psycopg://", "postgres://"):
        if url.startswith(prefix):
            return "postgresql://" + url.removeprefix(prefix)
    return url


def main() -> int:
    parser = argparse.ArgumentParser(description="Show catalogue/schedule row counts")
    parser.add_argument("--user", type=str, default=None, help="Also count schedules owned by this user id")
    args = parser.parse_args()

    backend_dir = Path(__file__).resolve().parents[1]
    _load_env_file(backend_dir / ".env")

    database_url = os.environ.get("DATABASE_URL")
    if not database_url:
        raise SystemExit("DATABASE_URL not set (backend/.env)")

    with psycopg2.connect(_psycopg_conninfo(database_url)) as conn:
        with conn.cursor() as cur:
            cur.execute(
                """
                select
                  (select count(*) from class_sections) as class_sections,
                  (select count(*) from schedules) as schedules,
                  (select count(*) from schedule_sections) as schedule_sections,
                  (select count(*) from user_schedules) as user_schedules
                """
            )
            row = cur.fetchone()
            counts = {
                "class_sections": row[0],
                "schedules": row[1],
                "schedule_sections": row[2],
                "user_schedules": row[3],
            }
            if args.user:
                cur.execute(
                    "select count(*), count(*) filter (where is_active) from user_schedules where user_id = %s",
                    (args.user,),
                )
                owned, active = cur.fetchone()
                counts["user_owned"] = owned
                counts["user_active"] = active

    print(counts)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
