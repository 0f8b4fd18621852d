"""Attendance bodies — per-person presence flags for one gathering date."""

from pydantic import Field

from lmpg.schemas.base import CamelModel


class AttendanceEntry(CamelModel):
    individual_id: int
    present: bool


class AttendanceSubmission(CamelModel):
    attendance_records: list[AttendanceEntry] = Field(default_factory=list)
