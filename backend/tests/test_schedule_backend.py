from __future__ import annotations

import uuid

import pytest

from core.database import SessionLocal
from scheduling.errors import ScheduleNotFoundError
from scheduling.ports import Identity
from services.schedule_backend import SqlScheduleBackend


def test_fetch_sections_orders_by_component_then_class_id(backend, catalog):
    sections = backend.fetch_sections(" cs ", "101")

    assert [(s.component, s.class_id) for s in sections] == [
        ("DIS", "1004"),
        ("LAB", "1003"),
        ("LEC", "1001"),
        ("LEC", "1002"),
    ]
    lab = sections[1]
    assert lab.uuid == str(catalog["cs101_lab"])
    assert lab.start_decimal == 14.0
    assert lab.duration == pytest.approx(1.83)
    assert lab.seats_available == 10


def test_get_section_handles_unknown_and_malformed_ids(backend, catalog):
    assert backend.get_section(catalog["math50_lec"]).dept == "MATH"
    assert backend.get_section(str(uuid.uuid4())) is None
    assert backend.get_section("not-a-uuid") is None


def test_get_sections_rejects_unknown_ids(backend, catalog):
    with pytest.raises(ValueError, match="UNKNOWN_SECTIONS"):
        backend.get_sections([str(catalog["cs101_lab"]), str(uuid.uuid4())])


def test_persist_creates_then_replaces_all(backend, catalog):
    lec = backend.get_section(catalog["cs101_lec_a"])
    lab = backend.get_section(catalog["cs101_lab"])
    math = backend.get_section(catalog["math50_lec_tuth"])

    schedule_id = backend.persist_schedule(None, "Plan A", "Fall", "2025", [lec, lab])
    saved = backend.get_saved_schedule(schedule_id)
    assert [s.uuid for s in saved.sections] == [lec.uuid, lab.uuid]
    assert (saved.name, saved.term, saved.year, saved.is_active) == ("Plan A", "Fall", "2025", True)

    same_id = backend.persist_schedule(schedule_id, "Plan A2", "Spring", "2026", [math, lec])
    assert same_id == schedule_id

    saved = backend.get_saved_schedule(schedule_id)
    assert [s.uuid for s in saved.sections] == [math.uuid, lec.uuid]
    assert (saved.name, saved.term, saved.year) == ("Plan A2", "Spring", "2026")


def test_persist_requires_identity(catalog):
    anonymous = SqlScheduleBackend(SessionLocal)

    with pytest.raises(PermissionError):
        anonymous.persist_schedule(None, "Plan", "Fall", "2025", [])


def test_fetch_saved_schedules_is_scoped_to_owner(backend, catalog):
    lec = backend.get_section(catalog["cs101_lec_a"])
    first = backend.persist_schedule(None, "First", "Fall", "2025", [lec])
    second = backend.persist_schedule(None, "Second", "Fall", "2025", [])
    other = SqlScheduleBackend(SessionLocal, Identity(user_id="user-2"))
    other.persist_schedule(None, "Theirs", "Fall", "2025", [lec])

    mine = backend.fetch_saved_schedules("user-1")

    assert {s.id for s in mine} == {first, second}
    assert [s.name for s in mine] == ["Second", "First"]
    with pytest.raises(ScheduleNotFoundError):
        other.get_saved_schedule(first)


def test_rename_activate_and_delete(backend, catalog):
    lec = backend.get_section(catalog["cs101_lec_a"])
    schedule_id = backend.persist_schedule(None, "Plan", "Fall", "2025", [lec])

    backend.rename_schedule(schedule_id, "Renamed")
    backend.set_active(schedule_id, False)
    saved = backend.get_saved_schedule(schedule_id)
    assert saved.name == "Renamed"
    assert not saved.is_active
    assert backend.fetch_saved_schedules("user-1", only_active=True) == []

    backend.delete_schedule(schedule_id)
    assert backend.fetch_saved_schedules("user-1") == []
    with pytest.raises(ScheduleNotFoundError):
        backend.get_saved_schedule(schedule_id)


def test_other_users_cannot_mutate(backend, catalog):
    schedule_id = backend.persist_schedule(None, "Plan", "Fall", "2025", [])
    intruder = SqlScheduleBackend(SessionLocal, Identity(user_id="user-2"))

    with pytest.raises(ScheduleNotFoundError):
        intruder.rename_schedule(schedule_id, "Mine now")
    with pytest.raises(ScheduleNotFoundError):
        intruder.delete_schedule(schedule_id)
    with pytest.raises(ScheduleNotFoundError):
        intruder.persist_schedule(schedule_id, "Mine now", "Fall", "2025", [])

    assert backend.get_saved_schedule(schedule_id).name == "Plan"
