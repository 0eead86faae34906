from __future__ import annotations

import os
import uuid

# Settings and the engine are built at import time: point them at an in-memory
# database before any app module is imported.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret"
os.environ["ENVIRONMENT"] = "test"

import pytest
from fastapi.testclient import TestClient

from core.database import ENGINE, SessionLocal, open_session
from core.security import create_access_token
from models import Base, ClassSection
from scheduling.ports import Identity
from schemas.section import Section
from services.schedule_backend import SqlScheduleBackend


@pytest.fixture
def make_section():
    def _make(
        uid: str,
        *,
        dept: str = "CS",
        code: str = "101",
        component: str = "LEC",
        days: str = "MWF",
        start: str = "09:00",
        end: str = "09:50",
        credit_hours: float | None = 3,
        class_id: str = "",
    ) -> Section:
        return Section(
            uuid=uid,
            class_id=class_id,
            dept=dept,
            code=code,
            title=f"{dept} {code}",
            component=component,
            days=days,
            start_time=start,
            end_time=end,
            credit_hours=credit_hours,
        )

    return _make


@pytest.fixture(autouse=True)
def fresh_tables():
    Base.metadata.drop_all(bind=ENGINE)
    Base.metadata.create_all(bind=ENGINE)
    yield


@pytest.fixture
def catalog() -> dict[str, uuid.UUID]:
    """A handful of catalogue rows keyed by a short name."""

    rows = {
        "cs101_lec_a": dict(class_id=1001, dept="CS", code="101", component="LEC", days="MWF", start_time="09:00", end_time="09:50", credit_hours=3),
        "cs101_lec_b": dict(class_id=1002, dept="CS", code="101", component="LEC", days="MWF", start_time="11:00", end_time="11:50", credit_hours=3),
        "cs101_lab": dict(class_id=1003, dept="CS", code="101", component="LAB", days="Tu", start_time="2:00 PM", end_time="3:50 PM", credit_hours=1),
        "cs101_dis": dict(class_id=1004, dept="CS", code="101", component="DIS", days="F", start_time="13:00", end_time="13:50", credit_hours=None),
        "math50_lec": dict(class_id=2001, dept="MATH", code="50", component="LEC", days="MWF", start_time="09:30", end_time="10:20", credit_hours=4),
        "math50_lec_tuth": dict(class_id=2002, dept="MATH", code="50", component="LEC", days="TuTh", start_time="09:30", end_time="10:45", credit_hours=4),
    }
    ids: dict[str, uuid.UUID] = {}
    with SessionLocal() as db:
        for name, values in rows.items():
            row = ClassSection(uuid=uuid.uuid4(), title=f"{values['dept']} {values['code']}", avail_seats=10, **values)
            db.add(row)
            ids[name] = row.uuid
        db.commit()
    return ids


@pytest.fixture
def backend() -> SqlScheduleBackend:
    return SqlScheduleBackend(open_session, Identity(user_id="user-1"))


@pytest.fixture
def client():
    from main import create_app

    with TestClient(create_app(bootstrap_schema=False)) as c:
        yield c


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user-1") -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user_id=user_id)}"}

    return _headers
