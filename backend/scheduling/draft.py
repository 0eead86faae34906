from __future__ import annotations

import enum
import logging
import threading
from collections.abc import Iterable
from dataclasses import dataclass

from schemas.schedule import SavedSchedule
from schemas.section import Section
from scheduling.conflicts import Classification, ClassificationKind, classify, slot_key
from scheduling.errors import DraftInvariantError, PersistenceError, ScheduleNotFoundError
from scheduling.ports import ActiveScheduleHandle, ScheduleBackend


logger = logging.getLogger(__name__)


DEFAULT_CREDIT_COMPONENTS = ("LEC", "LAB")


class DraftState(str, enum.Enum):
    EMPTY = "EMPTY"
    POPULATED_NEW = "POPULATED_NEW"
    POPULATED_EDITING_EXISTING = "POPULATED_EDITING_EXISTING"


class SyncStatus(str, enum.Enum):
    SYNCED = "SYNCED"
    # Not linked to a saved schedule, autosync disabled, or nothing changed.
    SKIPPED = "SKIPPED"
    # No identity; kept locally until flush().
    DEFERRED = "DEFERRED"
    # A newer revision already reached storage.
    STALE = "STALE"
    # Name, term or numeric year missing; kept until flush().
    INCOMPLETE = "INCOMPLETE"
    # The linked schedule no longer exists; the draft is now unsaved.
    UNLINKED = "UNLINKED"
    FAILED = "FAILED"


class SaveStatus(str, enum.Enum):
    SAVED = "SAVED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    EMPTY_NAME = "EMPTY_NAME"
    MISSING_FIELDS = "MISSING_FIELDS"
    FAILED = "FAILED"


_SAVE_MESSAGES = {
    SaveStatus.SAVED: "Schedule saved.",
    SaveStatus.NOT_AUTHENTICATED: "You must be logged in to save schedules.",
    SaveStatus.EMPTY_NAME: "Please give the schedule a name.",
    SaveStatus.MISSING_FIELDS: "Please fill in the term and a numeric year.",
    SaveStatus.FAILED: "Failed to save schedule. Please retry.",
}


@dataclass(frozen=True)
class DraftSnapshot:
    sections: tuple[Section, ...]
    name: str
    term: str
    year: str
    editing_existing: bool
    schedule_id: str | None
    pending_sync: bool
    revision: int
    generation: int

    @property
    def state(self) -> DraftState:
        if self.editing_existing:
            return DraftState.POPULATED_EDITING_EXISTING
        if self.sections:
            return DraftState.POPULATED_NEW
        return DraftState.EMPTY

    @property
    def linked(self) -> bool:
        return self.editing_existing and self.schedule_id is not None


@dataclass(frozen=True)
class AddOutcome:
    classification: Classification
    sync: SyncStatus = SyncStatus.SKIPPED

    @property
    def kind(self) -> ClassificationKind:
        return self.classification.kind

    @property
    def accepted(self) -> bool:
        return self.classification.accepted

    @property
    def message(self) -> str:
        return self.classification.message


@dataclass(frozen=True)
class SaveOutcome:
    status: SaveStatus
    schedule_id: str | None = None

    @property
    def ok(self) -> bool:
        return self.status == SaveStatus.SAVED

    @property
    def retryable(self) -> bool:
        return self.status == SaveStatus.FAILED

    @property
    def message(self) -> str:
        return _SAVE_MESSAGES[self.status]


class DraftStore:
    """Single authoritative holder of one in-progress schedule.

    Every mutator reads, classifies and commits under one lock, so two rapid
    adds always observe each other. Durable writes happen outside that lock,
    serialized through a second lock and ordered by revision: a write for an
    older revision is dropped once a newer one has landed.
    """

    def __init__(
        self,
        backend: ScheduleBackend,
        *,
        active: ActiveScheduleHandle | None = None,
        autosync: bool = True,
        credit_components: Iterable[str] = DEFAULT_CREDIT_COMPONENTS,
    ) -> None:
        self._backend = backend
        self._active = active
        self._autosync = autosync
        self._credit_components = frozenset(c.strip().upper() for c in credit_components if c.strip())

        self._lock = threading.Lock()
        self._write_lock = threading.Lock()

        self._sections: tuple[Section, ...] = ()
        self._name = ""
        self._term = ""
        self._year = ""
        self._editing_existing = False
        self._schedule_id: str | None = None
        self._pending_sync = False

        self._last_loaded_id: str | None = None
        self._revision = 0
        self._generation = 0
        self._written_revisions: dict[str, int] = {}

    # ----- reads -----

    def snapshot(self) -> DraftSnapshot:
        with self._lock:
            return self._snapshot_locked()

    @property
    def sections(self) -> tuple[Section, ...]:
        with self._lock:
            return self._sections

    @property
    def state(self) -> DraftState:
        return self.snapshot().state

    @property
    def schedule_id(self) -> str | None:
        with self._lock:
            return self._schedule_id

    @property
    def pending_sync(self) -> bool:
        with self._lock:
            return self._pending_sync

    def credit_hours(self) -> float:
        total = 0.0
        for s in self.sections:
            if s.component.strip().upper() in self._credit_components:
                total += float(s.credit_hours or 0)
        return total

    def matches(self, saved: SavedSchedule | None) -> bool:
        """True when the draft holds exactly the saved schedule's sections (any order)."""
        if saved is None:
            return False
        mine = self.sections
        if len(mine) != len(saved.sections):
            return False
        return {s.uuid for s in mine} == {s.uuid for s in saved.sections}

    def grouped_by_course(self) -> list[tuple[tuple[str, str], list[tuple[int, Section]]]]:
        groups: dict[tuple[str, str], list[tuple[int, Section]]] = {}
        for i, s in enumerate(self.sections):
            groups.setdefault(s.course_key, []).append((i, s))
        return list(groups.items())

    # ----- mutators -----

    def add_section(self, candidate: Section) -> AddOutcome:
        with self._lock:
            self._check_invariants_locked()
            verdict = classify(candidate, self._sections)

            if verdict.kind == ClassificationKind.NEW:
                self._sections = (*self._sections, candidate)
            elif verdict.kind == ClassificationKind.REPLACE:
                self._sections = tuple(candidate if s is verdict.other else s for s in self._sections)
            else:
                logger.info("Draft add rejected (%s): %s", verdict.kind.value, verdict.message)
                return AddOutcome(verdict)

            snapshot = self._commit_locked()

        logger.debug("Draft add accepted (%s) revision=%d", verdict.kind.value, snapshot.revision)
        return AddOutcome(verdict, self._sync(snapshot))

    def remove_section(self, index: int) -> Section | None:
        """Remove by position. Out-of-range indexes are ignored."""
        with self._lock:
            if index < 0 or index >= len(self._sections):
                logger.debug("Ignoring remove of index %d (draft has %d sections)", index, len(self._sections))
                return None
            removed = self._sections[index]
            self._sections = self._sections[:index] + self._sections[index + 1 :]
            snapshot = self._commit_locked()

        self._sync(snapshot)
        return removed

    def remove_section_by_id(self, section_uuid: str) -> Section | None:
        with self._lock:
            index = next((i for i, s in enumerate(self._sections) if s.uuid == section_uuid), None)
            if index is None:
                return None
            removed = self._sections[index]
            self._sections = self._sections[:index] + self._sections[index + 1 :]
            snapshot = self._commit_locked()

        self._sync(snapshot)
        return removed

    def set_metadata(self, *, name: str | None = None, term: str | None = None, year: str | int | None = None) -> None:
        with self._lock:
            if name is not None:
                self._name = name.strip()
            if term is not None:
                self._term = term.strip()
            if year is not None:
                self._year = str(year).strip()
            self._revision += 1
            if self._editing_existing:
                self._pending_sync = True

    def clear(self) -> None:
        with self._lock:
            self._clear_locked()
        logger.debug("Draft cleared")

    def load_existing(self, saved: SavedSchedule) -> bool:
        """Replace the whole draft with ``saved``. Returns False when it was already loaded."""
        with self._lock:
            if self._last_loaded_id is not None and saved.id == self._last_loaded_id:
                return False
            self._sections = tuple(saved.sections)
            self._name = saved.name
            self._term = saved.term
            self._year = saved.year
            self._editing_existing = True
            self._schedule_id = saved.id
            self._pending_sync = False
            self._last_loaded_id = saved.id
            self._generation += 1
            self._revision += 1

        logger.debug("Loaded saved schedule %s into draft (%d sections)", saved.id, len(saved.sections))
        return True

    def sync_with_active(self) -> bool:
        if self._active is None:
            return False
        saved = self._active.current()
        if saved is None:
            return False
        return self.load_existing(saved)

    def on_saved_schedule_deleted(self, schedule_id: str) -> bool:
        with self._lock:
            if self._schedule_id != schedule_id:
                return False
            self._clear_locked()
        logger.info("Draft cleared because its saved schedule %s was deleted", schedule_id)
        return True

    # ----- persistence -----

    def save(self) -> SaveOutcome:
        if self._backend.identity() is None:
            return SaveOutcome(SaveStatus.NOT_AUTHENTICATED)

        # Snapshot under the write lock: any sync that already landed is
        # older than what this save writes, and any later one waits for it.
        with self._write_lock:
            snapshot = self.snapshot()
            if not snapshot.name:
                return SaveOutcome(SaveStatus.EMPTY_NAME)
            if not _metadata_complete(snapshot):
                return SaveOutcome(SaveStatus.MISSING_FIELDS)

            target_id = snapshot.schedule_id if snapshot.editing_existing else None
            try:
                new_id = self._backend.persist_schedule(
                    target_id,
                    snapshot.name,
                    snapshot.term,
                    snapshot.year,
                    snapshot.sections,
                )
            except ScheduleNotFoundError:
                logger.warning("Schedule %s vanished before save; unlinking draft", target_id)
                self._unlink(target_id)
                return SaveOutcome(SaveStatus.FAILED)
            except (PersistenceError, ValueError):
                logger.warning("Saving draft failed (schedule_id=%s)", target_id, exc_info=True)
                return SaveOutcome(SaveStatus.FAILED, target_id)
            self._written_revisions[new_id] = max(self._written_revisions.get(new_id, 0), snapshot.revision)

        with self._lock:
            if self._generation == snapshot.generation:
                self._schedule_id = new_id
                self._editing_existing = True
                self._last_loaded_id = new_id
                self._pending_sync = self._revision > self._written_revisions.get(new_id, 0)

        logger.info("Saved draft as schedule %s (%d sections)", new_id, len(snapshot.sections))
        return SaveOutcome(SaveStatus.SAVED, new_id)

    def flush(self) -> SyncStatus:
        """Push a deferred, held or failed sync, if any. Works with autosync off."""
        snapshot = self.snapshot()
        if not snapshot.pending_sync:
            return SyncStatus.SKIPPED
        return self._sync(snapshot, explicit=True)

    # ----- internals -----

    def _snapshot_locked(self) -> DraftSnapshot:
        return DraftSnapshot(
            sections=self._sections,
            name=self._name,
            term=self._term,
            year=self._year,
            editing_existing=self._editing_existing,
            schedule_id=self._schedule_id,
            pending_sync=self._pending_sync,
            revision=self._revision,
            generation=self._generation,
        )

    def _commit_locked(self) -> DraftSnapshot:
        self._revision += 1
        if self._editing_existing:
            self._pending_sync = True
        return self._snapshot_locked()

    def _clear_locked(self) -> None:
        self._sections = ()
        self._name = ""
        self._term = ""
        self._year = ""
        self._editing_existing = False
        self._schedule_id = None
        self._pending_sync = False
        self._last_loaded_id = None
        self._generation += 1
        self._revision += 1

    def _check_invariants_locked(self) -> None:
        seen: set[tuple[str, str, str]] = set()
        for s in self._sections:
            key = slot_key(s)
            if key in seen:
                raise DraftInvariantError(f"Draft holds two sections for {key!r}")
            seen.add(key)

    def _sync(self, snapshot: DraftSnapshot, *, explicit: bool = False) -> SyncStatus:
        if not snapshot.linked or not (self._autosync or explicit):
            return SyncStatus.SKIPPED
        if self._backend.identity() is None:
            logger.warning("No identity; deferring sync of schedule %s", snapshot.schedule_id)
            return SyncStatus.DEFERRED

        if not snapshot.name or not _metadata_complete(snapshot):
            logger.info("Draft metadata incomplete; holding sync of schedule %s", snapshot.schedule_id)
            return SyncStatus.INCOMPLETE

        schedule_id = snapshot.schedule_id
        with self._write_lock:
            if snapshot.revision <= self._written_revisions.get(schedule_id, 0):
                return SyncStatus.STALE
            try:
                self._backend.persist_schedule(
                    schedule_id,
                    snapshot.name,
                    snapshot.term,
                    snapshot.year,
                    snapshot.sections,
                )
            except ScheduleNotFoundError:
                logger.warning("Schedule %s no longer exists; unlinking draft", schedule_id)
                self._unlink(schedule_id)
                return SyncStatus.UNLINKED
            except (PersistenceError, ValueError):
                logger.warning("Syncing draft to schedule %s failed", schedule_id, exc_info=True)
                return SyncStatus.FAILED
            self._written_revisions[schedule_id] = snapshot.revision

        with self._lock:
            if self._revision == snapshot.revision:
                self._pending_sync = False
        return SyncStatus.SYNCED

    def _unlink(self, schedule_id: str | None) -> None:
        # Caller holds _write_lock. Sections stay; the next save creates a new schedule.
        with self._lock:
            if schedule_id is None or self._schedule_id != schedule_id:
                return
            self._editing_existing = False
            self._schedule_id = None
            self._pending_sync = False
            self._last_loaded_id = None
            self._generation += 1
            self._revision += 1
        self._written_revisions.pop(schedule_id, None)


def _metadata_complete(snapshot: DraftSnapshot) -> bool:
    return bool(snapshot.term) and snapshot.year.isdigit()
