from __future__ import annotations

import uuid

from sqlalchemy import CheckConstraint, Column, Float, Index, Integer, String, Text, Uuid

from models.base import Base


class ClassSection(Base):
    """Course catalogue row: one schedulable offering of dept+code."""

    __tablename__ = "class_sections"

    uuid = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    class_id = Column(Integer, nullable=True, unique=True)
    dept = Column(String(16), nullable=False)
    code = Column(String(16), nullable=False)
    title = Column(Text, nullable=False)
    credit_hours = Column(Float, nullable=True)
    avail_seats = Column(Integer, nullable=True, default=0)
    component = Column(String(32), nullable=True)
    instructor = Column(Text, nullable=True)
    # Wall clock, '09:00' or '9:00 AM'.
    start_time = Column(String(8), nullable=True)
    end_time = Column(String(8), nullable=True)
    location = Column(Text, nullable=True)
    # Canonical day code, e.g. 'MWF' or 'TuTh'.
    days = Column(String(16), nullable=True)
    room = Column(String(32), nullable=True)

    __table_args__ = (
        CheckConstraint("credit_hours IS NULL OR credit_hours > 0", name="ck_class_sections_credit_hours"),
        Index("idx_class_sections_dept_code", "dept", "code"),
    )
