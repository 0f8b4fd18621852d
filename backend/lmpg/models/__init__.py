"""ORM Models — SQLAlchemy declarative models for all church entities.

Invariants:
    - All models inherit from Base (db/base.py)
    - Tenant-owned tables carry church_id

All models are imported here so Base.metadata is complete before
create_all() or Alembic autogenerate runs.
"""

from lmpg.models.user import User  # noqa: F401
from lmpg.models.church_settings import ChurchSettings  # noqa: F401
from lmpg.models.gathering_type import GatheringType  # noqa: F401
from lmpg.models.user_gathering_assignment import UserGatheringAssignment  # noqa: F401
from lmpg.models.family import Family  # noqa: F401
from lmpg.models.individual import Individual  # noqa: F401
from lmpg.models.gathering_list import GatheringList  # noqa: F401
from lmpg.models.attendance import AttendanceSession, AttendanceRecord  # noqa: F401
from lmpg.models.onboarding_progress import OnboardingProgress  # noqa: F401
from lmpg.models.audit_log import AuditLog  # noqa: F401
from lmpg.models.migration import Migration  # noqa: F401
