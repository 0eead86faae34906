from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, Sequence

from schemas.schedule import SavedSchedule
from schemas.section import Section


@dataclass(frozen=True)
class Identity:
    user_id: str


class ScheduleBackend(Protocol):
    """Durable storage and identity, as seen by a draft.

    Implementations raise ``PersistenceError`` when a call does not complete.
    """

    def fetch_sections(self, dept: str, code: str) -> list[Section]: ...

    def persist_schedule(
        self,
        schedule_id: str | None,
        name: str,
        term: str,
        year: str,
        sections: Sequence[Section],
    ) -> str:
        """Replace-all write. Returns the durable id (new when ``schedule_id`` is None)."""
        ...

    def fetch_saved_schedules(self, user_id: str) -> list[SavedSchedule]: ...

    def identity(self) -> Identity | None: ...


class ActiveScheduleHandle(Protocol):
    """Read-only view of the schedule the user currently has selected elsewhere."""

    def current(self) -> SavedSchedule | None: ...
