from __future__ import annotations

from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from schemas.section import SectionOut
from scheduling.draft import AddOutcome, DraftSnapshot, SaveOutcome


class DraftOut(BaseModel):
    state: str
    name: str
    term: str
    year: str
    editing_existing: bool
    schedule_id: str | None = None
    pending_sync: bool
    credit_hours: float
    sections: list[SectionOut]

    @classmethod
    def from_snapshot(cls, snapshot: DraftSnapshot, *, credit_hours: float) -> "DraftOut":
        return cls(
            state=snapshot.state.value,
            name=snapshot.name,
            term=snapshot.term,
            year=snapshot.year,
            editing_existing=snapshot.editing_existing,
            schedule_id=snapshot.schedule_id,
            pending_sync=snapshot.pending_sync,
            credit_hours=credit_hours,
            sections=[SectionOut.from_section(s) for s in snapshot.sections],
        )


class DraftMetadataPut(BaseModel):
    name: str | None = Field(default=None, max_length=200)
    term: str | None = Field(default=None, max_length=32, validation_alias=AliasChoices("term", "semester"))
    year: str | None = Field(default=None, max_length=8)


class AddSectionRequest(BaseModel):
    uuid: UUID


class AddSectionResponse(BaseModel):
    outcome: str
    message: str
    sync: str
    other: SectionOut | None = None
    draft: DraftOut

    @classmethod
    def from_outcome(cls, outcome: AddOutcome, draft: DraftOut) -> "AddSectionResponse":
        other = outcome.classification.other
        return cls(
            outcome=outcome.kind.value,
            message=outcome.message,
            sync=outcome.sync.value,
            other=SectionOut.from_section(other) if other is not None else None,
            draft=draft,
        )


class SaveDraftResponse(BaseModel):
    ok: bool
    status: str
    message: str
    retryable: bool = False
    schedule_id: str | None = None

    @classmethod
    def from_outcome(cls, outcome: SaveOutcome) -> "SaveDraftResponse":
        return cls(
            ok=outcome.ok,
            status=outcome.status.value,
            message=outcome.message,
            retryable=outcome.retryable,
            schedule_id=outcome.schedule_id,
        )
