from __future__ import annotations

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from schemas.section import Section, SectionOut


class SavedSchedule(BaseModel):
    """Durable schedule with its materialized section list."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = ""
    term: str = Field(default="", validation_alias=AliasChoices("term", "semester"))
    year: str = ""
    sections: tuple[Section, ...] = Field(default=(), validation_alias=AliasChoices("sections", "classes"))
    is_active: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", "year", mode="before")
    @classmethod
    def _stringify(cls, v) -> str:
        return "" if v is None else str(v)

    @field_validator("sections", mode="before")
    @classmethod
    def _none_to_empty(cls, v):
        return () if v is None else v


class SavedScheduleOut(BaseModel):
    id: str
    name: str
    term: str
    year: str
    is_active: bool
    sections: list[SectionOut]
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_saved(cls, saved: SavedSchedule) -> "SavedScheduleOut":
        return cls(
            id=saved.id,
            name=saved.name,
            term=saved.term,
            year=saved.year,
            is_active=saved.is_active,
            sections=[SectionOut.from_section(s) for s in saved.sections],
            created_at=saved.created_at,
            updated_at=saved.updated_at,
        )


class PersistScheduleRequest(BaseModel):
    schedule_id: str | None = Field(default=None, validation_alias=AliasChoices("schedule_id", "scheduleId"))
    name: str = Field(min_length=1, max_length=200)
    term: str = Field(min_length=1, max_length=32, validation_alias=AliasChoices("term", "semester"))
    year: int = Field(ge=2000, le=2999)
    section_ids: list[str] = Field(default_factory=list, validation_alias=AliasChoices("section_ids", "sectionIds"))


class PersistScheduleResponse(BaseModel):
    ok: bool = True
    id: str


class RenameScheduleRequest(BaseModel):
    name: str = Field(min_length=1, max_length=200)


class ScheduleFlagResponse(BaseModel):
    ok: bool = True
    id: str
    is_active: bool
