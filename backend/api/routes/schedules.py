from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_backend, get_registry, require_identity
from schemas.schedule import (
    PersistScheduleRequest,
    PersistScheduleResponse,
    RenameScheduleRequest,
    SavedScheduleOut,
    ScheduleFlagResponse,
)
from scheduling.ports import Identity
from services.draft_registry import DraftRegistry
from services.schedule_backend import SqlScheduleBackend


router = APIRouter()

logger = logging.getLogger(__name__)


@router.get("/", response_model=list[SavedScheduleOut])
def list_schedules(
    only_active: bool = Query(default=False),
    identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> list[SavedScheduleOut]:
    saved = backend.fetch_saved_schedules(identity.user_id, only_active=only_active)
    return [SavedScheduleOut.from_saved(s) for s in saved]


@router.get("/{schedule_id}", response_model=SavedScheduleOut)
def get_schedule(
    schedule_id: str,
    _identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> SavedScheduleOut:
    return SavedScheduleOut.from_saved(backend.get_saved_schedule(schedule_id))


@router.post("/", response_model=PersistScheduleResponse)
def persist_schedule(
    payload: PersistScheduleRequest,
    _identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> PersistScheduleResponse:
    try:
        sections = backend.get_sections(payload.section_ids)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    schedule_id = backend.persist_schedule(
        payload.schedule_id,
        payload.name.strip(),
        payload.term.strip(),
        str(payload.year),
        sections,
    )
    return PersistScheduleResponse(id=schedule_id)


@router.patch("/{schedule_id}", response_model=SavedScheduleOut)
def rename_schedule(
    schedule_id: str,
    payload: RenameScheduleRequest,
    _identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> SavedScheduleOut:
    name = payload.name.strip()
    if not name:
        raise HTTPException(status_code=400, detail="EMPTY_NAME")
    backend.rename_schedule(schedule_id, name)
    return SavedScheduleOut.from_saved(backend.get_saved_schedule(schedule_id))


@router.delete("/{schedule_id}")
def delete_schedule(
    schedule_id: str,
    identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
    registry: DraftRegistry = Depends(get_registry),
) -> dict:
    backend.delete_schedule(schedule_id)
    registry.schedule_deleted(identity, schedule_id)
    logger.info("Deleted schedule %s for user %s", schedule_id, identity.user_id)
    return {"ok": True, "id": schedule_id}


@router.post("/{schedule_id}/activate", response_model=ScheduleFlagResponse)
def activate_schedule(
    schedule_id: str,
    _identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> ScheduleFlagResponse:
    backend.set_active(schedule_id, True)
    return ScheduleFlagResponse(id=schedule_id, is_active=True)


@router.post("/{schedule_id}/deactivate", response_model=ScheduleFlagResponse)
def deactivate_schedule(
    schedule_id: str,
    _identity: Identity = Depends(require_identity),
    backend: SqlScheduleBackend = Depends(get_backend),
) -> ScheduleFlagResponse:
    backend.set_active(schedule_id, False)
    return ScheduleFlagResponse(id=schedule_id, is_active=False)
