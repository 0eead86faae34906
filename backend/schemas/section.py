from __future__ import annotations

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from scheduling.timeutils import calculate_duration, parse_days, time_to_decimal


class Section(BaseModel):
    """One offering of a course, as fetched from the catalogue.

    Immutable: swapping a section in a draft always replaces the object.
    """

    model_config = ConfigDict(frozen=True, from_attributes=True)

    uuid: str = Field(min_length=1)
    class_id: str = Field(default="", validation_alias=AliasChoices("class_id", "classID", "classid"))

    dept: str = Field(min_length=1, validation_alias=AliasChoices("dept", "department"))
    code: str = Field(min_length=1)
    title: str = ""

    days: str = ""
    start_time: str = Field(default="", validation_alias=AliasChoices("start_time", "starttime"))
    end_time: str = Field(default="", validation_alias=AliasChoices("end_time", "endtime"))
    component: str = ""

    instructor: str | None = None
    location: str | None = None
    room: str | None = None
    credit_hours: float | None = Field(default=None, validation_alias=AliasChoices("credit_hours", "credithours"))
    seats_available: int = Field(
        default=0,
        validation_alias=AliasChoices("seats_available", "availseats", "avail_seats"),
    )

    @field_validator("uuid", "class_id", mode="before")
    @classmethod
    def _stringify_ids(cls, v) -> str:
        return "" if v is None else str(v)

    @field_validator("days", "start_time", "end_time", "component", "title", mode="before")
    @classmethod
    def _none_to_empty(cls, v) -> str:
        return "" if v is None else str(v).strip()

    @field_validator("dept", "code", mode="before")
    @classmethod
    def _normalize_course_key(cls, v) -> str:
        return str(v or "").strip().upper()

    @field_validator("seats_available", mode="before")
    @classmethod
    def _none_to_zero(cls, v) -> int:
        return 0 if v is None else v

    @property
    def course_key(self) -> tuple[str, str]:
        return (self.dept, self.code)

    @property
    def day_set(self) -> frozenset[str]:
        return parse_days(self.days)

    @property
    def start_decimal(self) -> float:
        return time_to_decimal(self.start_time)

    @property
    def end_decimal(self) -> float:
        return time_to_decimal(self.end_time)

    @property
    def duration(self) -> float:
        return calculate_duration(self.start_time, self.end_time)

    def label(self) -> str:
        parts = [f"{self.dept} {self.code}"]
        if self.component:
            parts.append(self.component)
        if self.class_id:
            parts.append(f"#{self.class_id}")
        when = " ".join(p for p in (self.days, f"{self.start_time}-{self.end_time}" if self.start_time else "") if p)
        if when:
            parts.append(f"({when})")
        return " ".join(parts)


class SectionOut(BaseModel):
    uuid: str
    class_id: str
    dept: str
    code: str
    title: str
    days: str
    start_time: str
    end_time: str
    component: str
    instructor: str | None = None
    location: str | None = None
    room: str | None = None
    credit_hours: float | None = None
    seats_available: int = 0
    duration: float
    start_decimal: float

    @classmethod
    def from_section(cls, section: Section) -> "SectionOut":
        return cls(
            **section.model_dump(),
            duration=section.duration,
            start_decimal=section.start_decimal,
        )


class CourseSectionsOut(BaseModel):
    dept: str
    code: str
    title: str
    sections: list[SectionOut]
