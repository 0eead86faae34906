from __future__ import annotations

import uuid

from sqlalchemy import Column, ForeignKey, Integer, UniqueConstraint, Uuid

from models.base import Base


class ScheduleSection(Base):
    __tablename__ = "schedule_sections"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    schedule_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    section_uuid = Column(
        Uuid(as_uuid=True),
        ForeignKey("class_sections.uuid", ondelete="CASCADE"),
        nullable=False,
    )
    # Draft order, kept so a load/save round trip preserves display order.
    position = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("schedule_id", "section_uuid", name="uq_schedule_sections_schedule_section"),
    )
