from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Sequence

from schemas.section import Section


class ClassificationKind(str, enum.Enum):
    NEW = "NEW"
    REPLACE = "REPLACE"
    DUPLICATE = "DUPLICATE"
    TIME_CONFLICT = "TIME_CONFLICT"


@dataclass(frozen=True)
class Classification:
    """Verdict for inserting ``candidate`` into a section list.

    ``other`` is the replaced section (REPLACE), the already-present copy
    (DUPLICATE) or the first clashing section (TIME_CONFLICT).
    """

    kind: ClassificationKind
    candidate: Section
    other: Section | None = None

    @property
    def accepted(self) -> bool:
        return self.kind in (ClassificationKind.NEW, ClassificationKind.REPLACE)

    @property
    def message(self) -> str:
        c = self.candidate.label()
        if self.kind == ClassificationKind.DUPLICATE:
            return f"{c} is already in the schedule."
        if self.kind == ClassificationKind.TIME_CONFLICT:
            return f"{c} conflicts with {self.other.label()}."
        if self.kind == ClassificationKind.REPLACE:
            return f"Replaced {self.other.label()} with {c}."
        return f"Added {c}."


def slot_key(section: Section) -> tuple[str, str, str]:
    """(department, code, component): at most one section per key in a draft."""
    return (section.dept, section.code, section.component.strip().upper())


def sections_overlap(a: Section, b: Section) -> bool:
    # Half-open intervals: 9:00-9:50 and 9:50-10:40 do not clash.
    if not (a.day_set & b.day_set):
        return False
    return a.start_decimal < b.end_decimal and b.start_decimal < a.end_decimal


def find_time_conflict(
    candidate: Section,
    existing: Sequence[Section],
    *,
    ignore: Section | None = None,
) -> Section | None:
    for section in existing:
        if ignore is not None and section is ignore:
            continue
        if sections_overlap(candidate, section):
            return section
    return None


def classify(candidate: Section, existing: Sequence[Section]) -> Classification:
    """Classify an insertion as DUPLICATE, TIME_CONFLICT, REPLACE or NEW.

    Order matters: a duplicate id always wins; the same-slot section being
    swapped out is excluded from the time scan, but a clash with any other
    section still blocks the swap.
    """

    for section in existing:
        if section.uuid == candidate.uuid:
            return Classification(ClassificationKind.DUPLICATE, candidate, section)

    key = slot_key(candidate)
    same_slot = next((s for s in existing if slot_key(s) == key), None)

    clash = find_time_conflict(candidate, existing, ignore=same_slot)
    if clash is not None:
        return Classification(ClassificationKind.TIME_CONFLICT, candidate, clash)

    if same_slot is not None:
        return Classification(ClassificationKind.REPLACE, candidate, same_slot)

    return Classification(ClassificationKind.NEW, candidate)
