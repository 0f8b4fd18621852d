"""Domain Types — enums for every closed set of values stored in the database.

Invariants:
    - All valid states encoded as Enums — no raw string matching in services
    - Enum values are exactly the strings persisted in the DB
"""

from enum import Enum


class Role(str, Enum):
    """User roles — maps to users.role."""
    ADMIN = "admin"
    COORDINATOR = "coordinator"
    ATTENDANCE_TAKER = "attendance_taker"


class DayOfWeek(str, Enum):
    """Weekday names as stored in gathering_types.day_of_week."""
    SUNDAY = "Sunday"
    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @property
    def js_index(self) -> int:
        """Sunday-based index (Sunday=0 … Saturday=6)."""
        return list(DayOfWeek).index(self)


class Frequency(str, Enum):
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    MONTHLY = "monthly"


class AttendanceType(str, Enum):
    """standard = per-person roll call; headcount = a single number."""
    STANDARD = "standard"
    HEADCOUNT = "headcount"


class CustomScheduleType(str, Enum):
    ONE_OFF = "one_off"
    RECURRING = "recurring"


class PeopleType(str, Enum):
    """Individual classification — maps to individuals.people_type."""
    REGULAR = "regular"
    LOCAL_VISITOR = "local_visitor"
    TRAVELLER_VISITOR = "traveller_visitor"


VISITOR_TYPES = (PeopleType.LOCAL_VISITOR.value, PeopleType.TRAVELLER_VISITOR.value)


class MigrationStatus(str, Enum):
    """Bookkeeping status for operator-run SQL migrations."""
    SUCCESS = "success"
    FAILED = "failed"
    PENDING = "pending"


class OnboardingStep(int, Enum):
    """Wizard steps, in order."""
    CHURCH_INFO = 1
    GATHERING = 2
    ROSTER = 3
    COMPLETE = 4
