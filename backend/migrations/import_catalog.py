from __future__ import annotations

"""Load course sections from a CSV export into class_sections.

Expected columns (header names are case-insensitive):
  classid, dept, code, title, credithours, availseats, component,
  instructor, starttime, endtime, location, days, room[, uuid]

Day codes are rewritten to the canonical form ('MWF', 'TuTh') on the way in.
Rows are upserted by classid.

Run:
  python backend/migrations/import_catalog.py sections.csv --yes
"""

import argparse
import csv
import sys
import uuid
from pathlib import Path

# Allow running this script from any working directory.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from sqlalchemy import select

from core.bootstrap import ensure_schema
from core.database import SessionLocal
from models.class_section import ClassSection
from scheduling.timeutils import canonical_day_code


def _opt_int(v: str | None) -> int | None:
    v = (v or "").strip()
    return int(float(v)) if v else None


def _opt_float(v: str | None) -> float | None:
    v = (v or "").strip()
    return float(v) if v else None


def _opt_str(v: str | None) -> str | None:
    v = (v or "").strip()
    return v or None


def row_to_values(row: dict[str, str]) -> dict[str, object]:
    r = {k.strip().lower(): v for k, v in row.items() if k}
    return {
        "class_id": _opt_int(r.get("classid")),
        "dept": (r.get("dept") or "").strip().upper(),
        "code": (r.get("code") or "").strip().upper(),
        "title": (r.get("title") or "").strip(),
        "credit_hours": _opt_float(r.get("credithours")),
        "avail_seats": _opt_int(r.get("availseats")) or 0,
        "component": _opt_str(r.get("component")),
        "instructor": _opt_str(r.get("instructor")),
        "start_time": _opt_str(r.get("starttime")),
        "end_time": _opt_str(r.get("endtime")),
        "location": _opt_str(r.get("location")),
        "days": canonical_day_code(r.get("days")) or None,
        "room": _opt_str(r.get("room")),
        "uuid": uuid.UUID(r["uuid"]) if _opt_str(r.get("uuid")) else None,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Import course sections from CSV")
    parser.add_argument("csv_file", type=str)
    parser.add_argument("--yes", action="store_true", help="Actually write rows")
    args = parser.parse_args()

    path = Path(args.csv_file).resolve()
    with path.open(newline="", encoding="utf-8") as f:
        rows = [row_to_values(r) for r in csv.DictReader(f)]

    rows = [r for r in rows if r["dept"] and r["code"] and r["title"]]
    if not args.yes:
        print(f"Dry run: {len(rows)} valid rows in {path.name}. Re-run with --yes to import.")
        return 0

    ensure_schema()
    inserted = updated = 0
    with SessionLocal() as db:
        for values in rows:
            existing = None
            if values["class_id"] is not None:
                existing = db.execute(
                    select(ClassSection).where(ClassSection.class_id == values["class_id"])
                ).scalar_one_or_none()
            if existing is None:
                if values["uuid"] is None:
                    values.pop("uuid")
                db.add(ClassSection(**values))
                inserted += 1
            else:
                values.pop("uuid")
                for k, v in values.items():
                    setattr(existing, k, v)
                updated += 1
        db.commit()

    print(f"OK: inserted={inserted} updated={updated}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
