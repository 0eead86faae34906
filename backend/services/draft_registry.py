from __future__ import annotations

import logging
import threading
from typing import Callable

from schemas.schedule import SavedSchedule
from scheduling.draft import DraftStore
from scheduling.ports import Identity, ScheduleBackend


logger = logging.getLogger(__name__)


class ActiveScheduleSelection:
    """The saved schedule a user last opened. Read by their draft to auto-hydrate."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._current: SavedSchedule | None = None

    def current(self) -> SavedSchedule | None:
        with self._lock:
            return self._current

    def select(self, saved: SavedSchedule | None) -> None:
        with self._lock:
            self._current = saved

    def clear_if(self, schedule_id: str) -> bool:
        with self._lock:
            if self._current is not None and self._current.id == schedule_id:
                self._current = None
                return True
            return False


class DraftRegistry:
    """One DraftStore (and active selection) per user id, created on first use.

    In-process only: with several workers each keeps its own drafts.
    """

    def __init__(
        self,
        backend_factory: Callable[[Identity], ScheduleBackend],
        *,
        autosync: bool = True,
        credit_components: list[str] | tuple[str, ...] = ("LEC", "LAB"),
    ) -> None:
        self._backend_factory = backend_factory
        self._autosync = autosync
        self._credit_components = tuple(credit_components)
        self._lock = threading.Lock()
        self._drafts: dict[str, DraftStore] = {}
        self._selections: dict[str, ActiveScheduleSelection] = {}

    def selection_for(self, identity: Identity) -> ActiveScheduleSelection:
        with self._lock:
            return self._selections.setdefault(identity.user_id, ActiveScheduleSelection())

    def draft_for(self, identity: Identity) -> DraftStore:
        selection = self.selection_for(identity)
        with self._lock:
            draft = self._drafts.get(identity.user_id)
            if draft is None:
                draft = DraftStore(
                    self._backend_factory(identity),
                    active=selection,
                    autosync=self._autosync,
                    credit_components=self._credit_components,
                )
                self._drafts[identity.user_id] = draft
                logger.debug("Created draft for user %s", identity.user_id)
            return draft

    def forget(self, identity: Identity) -> None:
        """Drop a user's draft and selection (logout)."""
        with self._lock:
            draft = self._drafts.pop(identity.user_id, None)
            self._selections.pop(identity.user_id, None)
        if draft is not None:
            draft.clear()

    def schedule_deleted(self, identity: Identity, schedule_id: str) -> None:
        self.selection_for(identity).clear_if(schedule_id)
        with self._lock:
            draft = self._drafts.get(identity.user_id)
        if draft is not None:
            draft.on_saved_schedule_deleted(schedule_id)
