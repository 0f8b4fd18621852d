"""Attendance ORM — one session per gathering per date, one record per person per session.

Invariants:
    - (gathering_type_id, session_date) is unique
    - (session_id, individual_id) is unique; re-recording updates `present`
"""

from datetime import date, datetime

from sqlalchemy import (
    Boolean, Date, DateTime, ForeignKey, Integer, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column

from lmpg.db.base import Base
from lmpg.models._columns import utcnow


class AttendanceSession(Base):
    __tablename__ = "attendance_sessions"
    __table_args__ = (
        UniqueConstraint("gathering_type_id", "session_date", name="unique_session"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    gathering_type_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("gathering_types.id", ondelete="CASCADE"), nullable=False,
    )
    session_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    created_by: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow,
    )


class AttendanceRecord(Base):
    __tablename__ = "attendance_records"
    __table_args__ = (
        UniqueConstraint("session_id", "individual_id", name="unique_session_individual"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    church_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    session_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("attendance_sessions.id", ondelete="CASCADE"), nullable=False,
    )
    individual_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("individuals.id", ondelete="CASCADE"), nullable=False,
    )
    present: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow,
    )
