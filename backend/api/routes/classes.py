from __future__ import annotations

from fastapi import APIRouter, Depends

from api.deps import get_backend
from schemas.section import CourseSectionsOut, SectionOut
from services.schedule_backend import SqlScheduleBackend


router = APIRouter()


@router.get("/{dept}/{code}", response_model=CourseSectionsOut)
def get_course_sections(
    dept: str,
    code: str,
    backend: SqlScheduleBackend = Depends(get_backend),
) -> CourseSectionsOut:
    sections = backend.fetch_sections(dept, code)
    return CourseSectionsOut(
        dept=dept.strip().upper(),
        code=code.strip().upper(),
        title=sections[0].title if sections else "",
        sections=[SectionOut.from_section(s) for s in sections],
    )
