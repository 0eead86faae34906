from __future__ import annotations

import logging
import uuid
from typing import Callable, ContextManager, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.database import DatabaseUnavailableError, is_transient_db_connectivity_error
from models.base import utcnow
from models.class_section import ClassSection
from models.schedule import Schedule
from models.schedule_section import ScheduleSection
from models.user_schedule import UserSchedule
from schemas.schedule import SavedSchedule
from schemas.section import Section
from scheduling.errors import PersistenceError, ScheduleNotFoundError
from scheduling.ports import Identity


logger = logging.getLogger(__name__)


def _as_uuid(value) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    return uuid.UUID(str(value))


def _wrap_db_error(action: str, exc: SQLAlchemyError) -> PersistenceError:
    if is_transient_db_connectivity_error(exc):
        return DatabaseUnavailableError(f"Database temporarily unavailable ({action})")
    return PersistenceError(f"Database operation failed ({action})")


class SqlScheduleBackend:
    """Schedule storage over SQLAlchemy, scoped to one caller identity.

    Opens a short-lived session per call, so it is safe to share across the
    threads FastAPI runs sync endpoints on.
    """

    def __init__(self, session_factory: Callable[[], ContextManager[Session]], identity: Identity | None = None) -> None:
        self._session_factory = session_factory
        self._identity = identity

    def identity(self) -> Identity | None:
        return self._identity

    def _require_user_id(self) -> str:
        if self._identity is None:
            raise PermissionError("NOT_AUTHENTICATED")
        return self._identity.user_id

    # ----- catalogue -----

    def fetch_sections(self, dept: str, code: str) -> list[Section]:
        q = (
            select(ClassSection)
            .where(ClassSection.dept == dept.strip().upper())
            .where(ClassSection.code == code.strip().upper())
            .order_by(ClassSection.component.asc(), ClassSection.class_id.asc())
        )
        try:
            with self._session_factory() as db:
                rows = db.execute(q).scalars().all()
        except SQLAlchemyError as exc:
            raise _wrap_db_error("fetch_sections", exc) from exc
        return [Section.model_validate(r) for r in rows]

    def get_section(self, section_uuid) -> Section | None:
        try:
            key = _as_uuid(section_uuid)
        except ValueError:
            return None
        try:
            with self._session_factory() as db:
                row = db.get(ClassSection, key)
        except SQLAlchemyError as exc:
            raise _wrap_db_error("get_section", exc) from exc
        return Section.model_validate(row) if row is not None else None

    def get_sections(self, section_uuids: Sequence[str]) -> list[Section]:
        """Resolve ids in the given order. Unknown ids raise ValueError."""
        keys = [_as_uuid(u) for u in section_uuids]
        if not keys:
            return []
        try:
            with self._session_factory() as db:
                rows = db.execute(select(ClassSection).where(ClassSection.uuid.in_(keys))).scalars().all()
        except SQLAlchemyError as exc:
            raise _wrap_db_error("get_sections", exc) from exc
        by_id = {r.uuid: r for r in rows}
        missing = [str(k) for k in keys if k not in by_id]
        if missing:
            raise ValueError(f"UNKNOWN_SECTIONS: {', '.join(missing)}")
        return [Section.model_validate(by_id[k]) for k in keys]

    # ----- schedules -----

    def persist_schedule(
        self,
        schedule_id: str | None,
        name: str,
        term: str,
        year: str,
        sections: Sequence[Section],
    ) -> str:
        """Create or fully overwrite a schedule and its section list."""

        user_id = self._require_user_id()
        year_number = int(str(year).strip())

        section_keys: list[uuid.UUID] = []
        for s in sections:
            key = _as_uuid(s.uuid)
            if key not in section_keys:
                section_keys.append(key)

        try:
            with self._session_factory() as db:
                if section_keys:
                    known = set(
                        db.execute(select(ClassSection.uuid).where(ClassSection.uuid.in_(section_keys))).scalars().all()
                    )
                    missing = [str(k) for k in section_keys if k not in known]
                    if missing:
                        raise ValueError(f"UNKNOWN_SECTIONS: {', '.join(missing)}")

                if schedule_id is not None:
                    target = _as_uuid(schedule_id)
                    self._ensure_owner(db, user_id, target)
                    db.execute(
                        update(Schedule)
                        .where(Schedule.id == target)
                        .values(name=name, semester=term, year=year_number, last_edited=utcnow())
                    )
                    db.execute(delete(ScheduleSection).where(ScheduleSection.schedule_id == target))
                else:
                    schedule = Schedule(name=name, semester=term, year=year_number)
                    db.add(schedule)
                    db.flush()
                    target = schedule.id
                    db.add(UserSchedule(user_id=user_id, schedule_id=target, is_active=True))

                for position, key in enumerate(section_keys):
                    db.add(ScheduleSection(schedule_id=target, section_uuid=key, position=position))

                db.commit()
        except SQLAlchemyError as exc:
            logger.warning("persist_schedule failed (schedule_id=%s)", schedule_id, exc_info=exc)
            raise _wrap_db_error("persist_schedule", exc) from exc

        logger.debug("Persisted schedule %s with %d sections", target, len(section_keys))
        return str(target)

    def fetch_saved_schedules(self, user_id: str, *, only_active: bool = False) -> list[SavedSchedule]:
        q = (
            select(Schedule, UserSchedule.is_active)
            .join(UserSchedule, UserSchedule.schedule_id == Schedule.id)
            .where(UserSchedule.user_id == user_id)
            .order_by(Schedule.created_at.desc())
        )
        if only_active:
            q = q.where(UserSchedule.is_active.is_(True))

        try:
            with self._session_factory() as db:
                rows = db.execute(q).all()
                return [self._materialize(db, schedule, bool(is_active)) for schedule, is_active in rows]
        except SQLAlchemyError as exc:
            raise _wrap_db_error("fetch_saved_schedules", exc) from exc

    def get_saved_schedule(self, schedule_id: str) -> SavedSchedule:
        user_id = self._require_user_id()
        try:
            target = _as_uuid(schedule_id)
        except ValueError:
            raise ScheduleNotFoundError(schedule_id)
        try:
            with self._session_factory() as db:
                link = self._ensure_owner(db, user_id, target)
                schedule = db.get(Schedule, target)
                if schedule is None:
                    raise ScheduleNotFoundError(schedule_id)
                return self._materialize(db, schedule, bool(link.is_active))
        except SQLAlchemyError as exc:
            raise _wrap_db_error("get_saved_schedule", exc) from exc

    def rename_schedule(self, schedule_id: str, name: str) -> None:
        self._mutate_owned(
            "rename_schedule",
            schedule_id,
            lambda db, target: db.execute(
                update(Schedule).where(Schedule.id == target).values(name=name, last_edited=utcnow())
            ),
        )

    def delete_schedule(self, schedule_id: str) -> None:
        def _delete(db: Session, target: uuid.UUID) -> None:
            # Explicit child deletes: SQLite does not enforce ON DELETE CASCADE by default.
            db.execute(delete(ScheduleSection).where(ScheduleSection.schedule_id == target))
            db.execute(delete(UserSchedule).where(UserSchedule.schedule_id == target))
            db.execute(delete(Schedule).where(Schedule.id == target))

        self._mutate_owned("delete_schedule", schedule_id, _delete)

    def set_active(self, schedule_id: str, is_active: bool) -> None:
        user_id = self._require_user_id()
        self._mutate_owned(
            "set_active",
            schedule_id,
            lambda db, target: db.execute(
                update(UserSchedule)
                .where(UserSchedule.schedule_id == target)
                .where(UserSchedule.user_id == user_id)
                .values(is_active=bool(is_active))
            ),
        )

    # ----- internals -----

    def _mutate_owned(self, action: str, schedule_id: str, fn) -> None:
        user_id = self._require_user_id()
        try:
            target = _as_uuid(schedule_id)
        except ValueError:
            raise ScheduleNotFoundError(schedule_id)
        try:
            with self._session_factory() as db:
                self._ensure_owner(db, user_id, target)
                fn(db, target)
                db.commit()
        except SQLAlchemyError as exc:
            logger.warning("%s failed (schedule_id=%s)", action, schedule_id, exc_info=exc)
            raise _wrap_db_error(action, exc) from exc

    @staticmethod
    def _ensure_owner(db: Session, user_id: str, schedule_id: uuid.UUID) -> UserSchedule:
        link = db.execute(
            select(UserSchedule)
            .where(UserSchedule.user_id == user_id)
            .where(UserSchedule.schedule_id == schedule_id)
        ).scalar_one_or_none()
        if link is None:
            raise ScheduleNotFoundError(str(schedule_id))
        return link

    @staticmethod
    def _materialize(db: Session, schedule: Schedule, is_active: bool) -> SavedSchedule:
        rows = db.execute(
            select(ClassSection)
            .join(ScheduleSection, ScheduleSection.section_uuid == ClassSection.uuid)
            .where(ScheduleSection.schedule_id == schedule.id)
            .order_by(ScheduleSection.position.asc())
        ).scalars().all()
        return SavedSchedule(
            id=str(schedule.id),
            name=schedule.name,
            term=schedule.semester,
            year=str(schedule.year),
            sections=tuple(Section.model_validate(r) for r in rows),
            is_active=is_active,
            created_at=schedule.created_at,
            updated_at=schedule.last_edited,
        )
