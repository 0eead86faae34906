from __future__ import annotations

import uuid

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, UniqueConstraint, Uuid

from models.base import Base


class UserSchedule(Base):
    """Ownership link between an auth user id and a schedule."""

    __tablename__ = "user_schedules"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(String(64), nullable=False)
    schedule_id = Column(
        Uuid(as_uuid=True),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
    )
    is_active = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("user_id", "schedule_id", name="uq_user_schedules_user_schedule"),
        Index("idx_user_schedules_user", "user_id"),
    )
