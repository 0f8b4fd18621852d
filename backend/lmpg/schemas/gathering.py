"""Gathering Schemas — create/update/duplicate bodies for /api/gatherings.

Invariants:
    - name: 1-255 chars after stripping
    - start_time matches HH:MM (24h, leading zero optional)
    - custom_schedule, when present, has a valid type and startDate
      (recurring also needs endDate)

Cross-field rules (standard vs headcount requirements) are enforced in
core/schedule.py so create, update and duplicate share them.
"""

from pydantic import Field, field_validator

from lmpg.core.domain_types import AttendanceType, DayOfWeek, Frequency
from lmpg.core.schedule import TIME_PATTERN, validate_custom_schedule
from lmpg.schemas.base import CamelModel, Name


class GatheringCreate(CamelModel):
    name: Name
    description: str | None = None
    day_of_week: DayOfWeek | None = None
    start_time: str | None = Field(None, pattern=TIME_PATTERN)
    end_time: str | None = None
    frequency: Frequency | None = None
    attendance_type: AttendanceType
    custom_schedule: dict | None = None
    group_by_family: bool = True
    kiosk_enabled: bool = False
    kiosk_end_time: str | None = None
    kiosk_message: str | None = None
    set_as_default: bool = False

    @field_validator("custom_schedule")
    @classmethod
    def check_custom_schedule(cls, v: dict | None) -> dict | None:
        return validate_custom_schedule(v)


class GatheringUpdate(GatheringCreate):
    """Same fields as create; omitting attendanceType keeps the current type."""
    attendance_type: AttendanceType | None = None


class GatheringDuplicate(CamelModel):
    name: str | None = None
