"""Gathering Type ORM — a recurring service or group that attendance is taken for.

Invariants:
    - Scoped by church_id
    - attendance_type is standard | headcount
    - Headcount gatherings with a custom_schedule have NULL weekly-slot columns
      (see core/schedule.py)
"""

from datetime import datetime

from sqlalchemy import JSON, Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class GatheringType(Base):
    __tablename__ = "gathering_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    day_of_week: Mapped[str | None] = mapped_column(String(10), nullable=True)
    start_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    end_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    duration_minutes: Mapped[int | None] = mapped_column(Integer, nullable=True, default=90)
    frequency: Mapped[str | None] = mapped_column(String(10), nullable=True)
    attendance_type: Mapped[str] = mapped_column(
        String(10), nullable=False, default="standard",
    )
    custom_schedule: Mapped[dict | None] = mapped_column(JSON, nullable=True)
    group_by_family: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    kiosk_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    kiosk_end_time: Mapped[str | None] = mapped_column(String(8), nullable=True)
    kiosk_message: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
