"""Gathering Schedule Rules — pure validation and normalization of schedule fields.

Invariants:
    - Standard gatherings always carry day_of_week, start_time and frequency
    - Headcount gatherings carry either a non-empty custom schedule or those three fields
    - A headcount gathering with a custom schedule stores NULL weekly-slot fields
    - Kiosk check-in is only ever enabled for standard gatherings
"""

import calendar
from dataclasses import dataclass
from datetime import date, timedelta

from lmpg.core.domain_types import AttendanceType, CustomScheduleType, DayOfWeek, Frequency
from lmpg.core.errors import ValidationFailedError

TIME_PATTERN = r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$"


@dataclass(frozen=True)
class ScheduleFields:
    """Weekly-slot columns as they should be written to gathering_types."""
    day_of_week: str | None
    start_time: str | None
    end_time: str | None
    frequency: str | None


def has_custom_schedule(custom_schedule: dict | None) -> bool:
    return bool(custom_schedule)


def validate_custom_schedule(custom_schedule: dict | None) -> dict | None:
    """Check the shape of a custom schedule object. Returns it unchanged."""
    if not custom_schedule:
        return custom_schedule
    valid_types = {t.value for t in CustomScheduleType}
    if custom_schedule.get("type") not in valid_types:
        raise ValueError("Custom schedule must have valid type")
    if not custom_schedule.get("startDate"):
        raise ValueError("Custom schedule must have startDate")
    if (
        custom_schedule["type"] == CustomScheduleType.RECURRING.value
        and not custom_schedule.get("endDate")
    ):
        raise ValueError("Recurring schedule must have endDate")
    return custom_schedule


def check_required_fields(
    attendance_type: str | None,
    day_of_week: str | None,
    start_time: str | None,
    frequency: str | None,
    custom_schedule: dict | None,
) -> None:
    """Raise ValidationFailedError when the type's required schedule is missing."""
    has_slot = bool(day_of_week and start_time and frequency)
    if attendance_type == AttendanceType.STANDARD.value and not has_slot:
        raise ValidationFailedError(
            "Standard gatherings require day of week, start time, and frequency",
        )
    if (
        attendance_type == AttendanceType.HEADCOUNT.value
        and not has_custom_schedule(custom_schedule)
        and not has_slot
    ):
        raise ValidationFailedError(
            "Headcount gatherings require either a custom schedule or basic schedule fields",
        )


def normalize_schedule(
    attendance_type: str | None,
    day_of_week: str | None,
    start_time: str | None,
    end_time: str | None,
    frequency: str | None,
    custom_schedule: dict | None,
) -> ScheduleFields:
    """Resolve which weekly-slot values get persisted."""
    if (
        attendance_type == AttendanceType.HEADCOUNT.value
        and has_custom_schedule(custom_schedule)
    ):
        return ScheduleFields(None, None, None, None)
    return ScheduleFields(
        day_of_week=day_of_week,
        start_time=start_time,
        end_time=end_time or None,
        frequency=frequency or Frequency.WEEKLY.value,
    )


def kiosk_allowed(attendance_type: str | None, kiosk_enabled: bool | None) -> bool:
    return attendance_type == AttendanceType.STANDARD.value and bool(kiosk_enabled)


def sample_session_dates(
    day_of_week: DayOfWeek, today: date, count: int = 4,
) -> list[date]:
    """Past occurrences of a weekday, 1..count weeks before its latest occurrence.

    The latest occurrence is today when today is that weekday.
    """
    today_index = (today.weekday() + 1) % 7  # Sunday-based
    days_back = (today_index - day_of_week.js_index + 7) % 7
    latest = today - timedelta(days=days_back)
    return [latest - timedelta(weeks=i) for i in range(1, count + 1)]


def one_month_before(today: date) -> date:
    """Same day of the previous calendar month, clamped to that month's length."""
    year, month = (today.year, today.month - 1) if today.month > 1 else (today.year - 1, 12)
    return date(year, month, min(today.day, calendar.monthrange(year, month)[1]))
