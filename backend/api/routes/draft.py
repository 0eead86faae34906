from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.deps import get_backend, get_draft, get_registry, require_identity
from schemas.draft import AddSectionRequest, AddSectionResponse, DraftMetadataPut, DraftOut, SaveDraftResponse
from scheduling.draft import DraftStore, SaveStatus
from scheduling.ports import Identity
from services.draft_registry import DraftRegistry
from services.schedule_backend import SqlScheduleBackend


router = APIRouter()

logger = logging.getLogger(__name__)


_SAVE_STATUS_CODES = {
    SaveStatus.SAVED: 200,
    SaveStatus.NOT_AUTHENTICATED: 401,
    SaveStatus.EMPTY_NAME: 400,
    SaveStatus.MISSING_FIELDS: 400,
    SaveStatus.FAILED: 503,
}


def _draft_out(draft: DraftStore) -> DraftOut:
    return DraftOut.from_snapshot(draft.snapshot(), credit_hours=draft.credit_hours())


@router.get("/", response_model=DraftOut)
def get_draft_state(draft: DraftStore = Depends(get_draft)) -> DraftOut:
    # Hydrate from the schedule the user last opened; no-op once loaded.
    draft.sync_with_active()
    return _draft_out(draft)


@router.put("/", response_model=DraftOut)
def put_draft_metadata(payload: DraftMetadataPut, draft: DraftStore = Depends(get_draft)) -> DraftOut:
    draft.set_metadata(name=payload.name, term=payload.term, year=payload.year)
    return _draft_out(draft)


@router.delete("/", response_model=DraftOut)
def clear_draft(
    identity: Identity = Depends(require_identity),
    draft: DraftStore = Depends(get_draft),
    registry: DraftRegistry = Depends(get_registry),
) -> DraftOut:
    registry.selection_for(identity).select(None)
    draft.clear()
    return _draft_out(draft)


@router.post("/sections", response_model=AddSectionResponse)
def add_section(
    payload: AddSectionRequest,
    draft: DraftStore = Depends(get_draft),
    backend: SqlScheduleBackend = Depends(get_backend),
):
    candidate = backend.get_section(payload.uuid)
    if candidate is None:
        raise HTTPException(status_code=404, detail="SECTION_NOT_FOUND")

    outcome = draft.add_section(candidate)
    body = AddSectionResponse.from_outcome(outcome, _draft_out(draft))
    if not outcome.accepted:
        return JSONResponse(status_code=409, content=body.model_dump(mode="json"))
    return body


@router.delete("/sections/by-id/{section_uuid}", response_model=DraftOut)
def remove_section_by_id(section_uuid: str, draft: DraftStore = Depends(get_draft)) -> DraftOut:
    draft.remove_section_by_id(section_uuid)
    return _draft_out(draft)


@router.delete("/sections/{index}", response_model=DraftOut)
def remove_section(index: int, draft: DraftStore = Depends(get_draft)) -> DraftOut:
    draft.remove_section(index)
    return _draft_out(draft)


@router.post("/load/{schedule_id}", response_model=DraftOut)
def load_schedule(
    schedule_id: str,
    identity: Identity = Depends(require_identity),
    draft: DraftStore = Depends(get_draft),
    backend: SqlScheduleBackend = Depends(get_backend),
    registry: DraftRegistry = Depends(get_registry),
) -> DraftOut:
    saved = backend.get_saved_schedule(schedule_id)
    registry.selection_for(identity).select(saved)
    if not draft.load_existing(saved):
        logger.debug("Schedule %s already loaded into draft", schedule_id)
    return _draft_out(draft)


@router.post("/save", response_model=SaveDraftResponse)
def save_draft(draft: DraftStore = Depends(get_draft)):
    outcome = draft.save()
    body = SaveDraftResponse.from_outcome(outcome)
    status_code = _SAVE_STATUS_CODES[outcome.status]
    if status_code != 200:
        return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))
    return body


@router.post("/flush", response_model=DraftOut)
def flush_draft(draft: DraftStore = Depends(get_draft)) -> DraftOut:
    draft.flush()
    return _draft_out(draft)
