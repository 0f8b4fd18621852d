"""Gathering Service — list, create, update, duplicate and delete gathering types.

Invariants:
    - Every query filters on the caller's church_id
    - Non-admins only see gatherings they are assigned to
    - Schedule fields go through core/schedule.py before they are written
    - Multi-row writes (create, duplicate, delete) commit once
"""

import logging
from datetime import date

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.core.domain_types import PeopleType, Role, VISITOR_TYPES
from lmpg.core.errors import (
    BusinessRuleError, PermissionDeniedError, ResourceNotFoundError,
    ValidationFailedError,
)
from lmpg.core.schedule import (
    check_required_fields, kiosk_allowed, normalize_schedule, one_month_before,
)
from lmpg.models.attendance import AttendanceRecord, AttendanceSession
from lmpg.models.family import Family
from lmpg.models.gathering_list import GatheringList
from lmpg.models.gathering_type import GatheringType
from lmpg.models.individual import Individual
from lmpg.models.user import User
from lmpg.models.user_gathering_assignment import UserGatheringAssignment
from lmpg.schemas.gathering import GatheringCreate, GatheringUpdate

logger = logging.getLogger(__name__)


def serialize_gathering(g: GatheringType, **counts) -> dict:
    return {
        "id": g.id,
        "name": g.name,
        "description": g.description,
        "day_of_week": g.day_of_week,
        "start_time": g.start_time,
        "end_time": g.end_time,
        "duration_minutes": g.duration_minutes,
        "frequency": g.frequency,
        "attendance_type": g.attendance_type,
        "custom_schedule": g.custom_schedule,
        "group_by_family": g.group_by_family,
        "kiosk_enabled": g.kiosk_enabled,
        "kiosk_end_time": g.kiosk_end_time,
        "kiosk_message": g.kiosk_message,
        "is_active": g.is_active,
        "created_at": g.created_at,
        **counts,
    }


def member_count_column():
    """Correlated count of active regular attendees on a gathering's list."""
    return (
        select(func.count(func.distinct(GatheringList.individual_id)))
        .join(Individual, GatheringList.individual_id == Individual.id)
        .where(
            GatheringList.gathering_type_id == GatheringType.id,
            Individual.is_active.is_(True),
            Individual.people_type == PeopleType.REGULAR.value,
        )
        .correlate(GatheringType)
        .scalar_subquery()
    )


def recent_visitor_count_column(since: date):
    return (
        select(func.count(func.distinct(AttendanceRecord.individual_id)))
        .join(AttendanceSession, AttendanceRecord.session_id == AttendanceSession.id)
        .join(Individual, AttendanceRecord.individual_id == Individual.id)
        .where(
            AttendanceSession.gathering_type_id == GatheringType.id,
            AttendanceSession.session_date >= since,
            AttendanceRecord.present.is_(True),
            Individual.people_type.in_(VISITOR_TYPES),
        )
        .correlate(GatheringType)
        .scalar_subquery()
    )


def assigned_gathering_ids(user_id: int):
    return select(UserGatheringAssignment.gathering_type_id).where(
        UserGatheringAssignment.user_id == user_id,
    )


async def is_assigned(db: AsyncSession, user: User, gathering_id: int) -> bool:
    result = await db.execute(
        select(UserGatheringAssignment.id).where(
            UserGatheringAssignment.user_id == user.id,
            UserGatheringAssignment.gathering_type_id == gathering_id,
            UserGatheringAssignment.church_id == user.church_id,
        ),
    )
    return result.first() is not None


async def get_gathering(
    db: AsyncSession, church_id: str, gathering_id: int,
) -> GatheringType | None:
    result = await db.execute(
        select(GatheringType).where(
            GatheringType.id == gathering_id,
            GatheringType.church_id == church_id,
        ),
    )
    return result.scalar_one_or_none()


async def list_gatherings(db: AsyncSession, user: User, today: date | None = None) -> list[dict]:
    since = one_month_before(today or date.today())
    query = (
        select(
            GatheringType,
            member_count_column().label("member_count"),
            recent_visitor_count_column(since).label("recent_visitor_count"),
        )
        .where(
            GatheringType.church_id == user.church_id,
            GatheringType.is_active.is_(True),
        )
        .order_by(GatheringType.id)
    )
    if user.role != Role.ADMIN.value:
        query = query.where(GatheringType.id.in_(assigned_gathering_ids(user.id)))

    result = await db.execute(query)
    return [
        serialize_gathering(
            g, member_count=member_count or 0,
            recent_visitor_count=recent_visitor_count or 0,
        )
        for g, member_count, recent_visitor_count in result.all()
    ]


def _schedule_values(data: GatheringCreate, attendance_type: str) -> dict:
    check_required_fields(
        attendance_type, data.day_of_week, data.start_time,
        data.frequency, data.custom_schedule,
    )
    schedule = normalize_schedule(
        attendance_type, data.day_of_week, data.start_time,
        data.end_time, data.frequency, data.custom_schedule,
    )
    return {
        "day_of_week": schedule.day_of_week,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "frequency": schedule.frequency,
        "attendance_type": attendance_type,
        "custom_schedule": data.custom_schedule or None,
        "kiosk_enabled": kiosk_allowed(attendance_type, data.kiosk_enabled),
        "kiosk_end_time": data.kiosk_end_time or None,
        "kiosk_message": data.kiosk_message or None,
    }


async def create_gathering(
    db: AsyncSession, user: User, data: GatheringCreate,
) -> GatheringType:
    gathering = GatheringType(
        church_id=user.church_id,
        name=data.name,
        description=data.description,
        group_by_family=data.group_by_family,
        created_by=user.id,
        **_schedule_values(data, data.attendance_type),
    )
    db.add(gathering)
    await db.flush()
    db.add(UserGatheringAssignment(
        church_id=user.church_id, user_id=user.id,
        gathering_type_id=gathering.id, assigned_by=user.id,
    ))
    if data.set_as_default:
        await db.execute(
            update(User)
            .where(User.id == user.id, User.church_id == user.church_id)
            .values(default_gathering_id=gathering.id),
        )
    await db.commit()
    logger.info(
        f"Gathering created: {gathering.name}",
        extra={"church_id": user.church_id, "gathering_id": gathering.id},
    )
    return gathering


async def has_attendance_sessions(db: AsyncSession, church_id: str, gathering_id: int) -> bool:
    result = await db.execute(
        select(AttendanceSession.id).where(
            AttendanceSession.gathering_type_id == gathering_id,
            AttendanceSession.church_id == church_id,
        ).limit(1),
    )
    return result.first() is not None


async def update_gathering(
    db: AsyncSession, user: User, gathering_id: int, data: GatheringUpdate,
) -> GatheringType:
    if not await is_assigned(db, user, gathering_id):
        raise PermissionDeniedError("You do not have access to this gathering")
    gathering = await get_gathering(db, user.church_id, gathering_id)
    if gathering is None:
        raise ResourceNotFoundError("Gathering not found")

    attendance_type = data.attendance_type or gathering.attendance_type
    if (
        attendance_type != gathering.attendance_type
        and await has_attendance_sessions(db, user.church_id, gathering_id)
    ):
        raise BusinessRuleError(
            "Cannot change gathering type when attendance records exist. "
            "Please delete all attendance records first.",
            code="ATTENDANCE_TYPE_LOCKED",
        )

    values = _schedule_values(data, attendance_type)
    gathering.name = data.name
    gathering.description = data.description
    gathering.group_by_family = data.group_by_family
    for key, value in values.items():
        setattr(gathering, key, value)
    await db.commit()
    return gathering


async def list_members(db: AsyncSession, church_id: str, gathering_id: int) -> list[dict]:
    result = await db.execute(
        select(
            Individual.id, Individual.first_name, Individual.last_name,
            Family.family_name,
        )
        .join(GatheringList, GatheringList.individual_id == Individual.id)
        .outerjoin(Family, Individual.family_id == Family.id)
        .where(
            GatheringList.gathering_type_id == gathering_id,
            GatheringList.church_id == church_id,
        )
        .order_by(Individual.last_name, Individual.first_name),
    )
    return [dict(row._mapping) for row in result.all()]


async def duplicate_gathering(
    db: AsyncSession, user: User, gathering_id: int, name: str | None,
) -> dict:
    name = (name or "").strip()
    if not name:
        raise ValidationFailedError("New gathering name is required.", "name")

    query = select(GatheringType).where(
        GatheringType.id == gathering_id,
        GatheringType.church_id == user.church_id,
    )
    if user.role != Role.ADMIN.value:
        query = query.where(GatheringType.id.in_(assigned_gathering_ids(user.id)))
    source = (await db.execute(query)).scalar_one_or_none()
    if source is None:
        raise ResourceNotFoundError("Gathering not found or access denied.")

    clash = await db.execute(
        select(GatheringType.id).where(
            GatheringType.church_id == user.church_id,
            GatheringType.name == name,
        ),
    )
    if clash.first():
        raise BusinessRuleError(
            "A gathering with this name already exists.", code="DUPLICATE_NAME",
        )

    schedule = normalize_schedule(
        source.attendance_type, source.day_of_week, source.start_time,
        source.end_time, source.frequency, source.custom_schedule,
    )
    copy = GatheringType(
        church_id=user.church_id,
        name=name,
        description=source.description,
        day_of_week=schedule.day_of_week,
        start_time=schedule.start_time,
        end_time=schedule.end_time,
        frequency=schedule.frequency,
        duration_minutes=source.duration_minutes,
        attendance_type=source.attendance_type,
        custom_schedule=source.custom_schedule,
        group_by_family=source.group_by_family,
        created_by=user.id,
    )
    db.add(copy)
    await db.flush()

    members = await db.execute(
        select(GatheringList.individual_id).where(
            GatheringList.gathering_type_id == source.id,
            GatheringList.church_id == user.church_id,
        ),
    )
    for (individual_id,) in members.all():
        db.add(GatheringList(
            church_id=user.church_id, gathering_type_id=copy.id,
            individual_id=individual_id, added_by=user.id,
        ))
    assignees = await db.execute(
        select(UserGatheringAssignment.user_id).where(
            UserGatheringAssignment.gathering_type_id == source.id,
            UserGatheringAssignment.church_id == user.church_id,
        ),
    )
    for (user_id,) in assignees.all():
        db.add(UserGatheringAssignment(
            church_id=user.church_id, user_id=user_id,
            gathering_type_id=copy.id, assigned_by=user.id,
        ))
    await db.commit()

    count = await db.execute(
        select(func.count(func.distinct(GatheringList.individual_id))).where(
            GatheringList.gathering_type_id == copy.id,
        ),
    )
    logger.info(
        f"Gathering {source.id} duplicated as {copy.id}",
        extra={"church_id": user.church_id, "gathering_id": copy.id},
    )
    return serialize_gathering(copy, member_count=count.scalar_one())


async def delete_gathering_cascade(db: AsyncSession, church_id: str, gathering_id: int) -> None:
    """Remove a gathering and every row that hangs off it. Does not commit."""
    session_ids = select(AttendanceSession.id).where(
        AttendanceSession.gathering_type_id == gathering_id,
        AttendanceSession.church_id == church_id,
    )
    await db.execute(
        delete(AttendanceRecord).where(AttendanceRecord.session_id.in_(session_ids)),
    )
    for model in (AttendanceSession, GatheringList, UserGatheringAssignment):
        await db.execute(
            delete(model).where(
                model.gathering_type_id == gathering_id, model.church_id == church_id,
            ),
        )
    await db.execute(
        update(User)
        .where(User.church_id == church_id, User.default_gathering_id == gathering_id)
        .values(default_gathering_id=None),
    )
    await db.execute(
        delete(GatheringType).where(
            GatheringType.id == gathering_id, GatheringType.church_id == church_id,
        ),
    )


async def get_created_gathering(
    db: AsyncSession, user: User, gathering_id: int,
) -> GatheringType:
    """A gathering the caller created, else 404."""
    result = await db.execute(
        select(GatheringType).where(
            GatheringType.id == gathering_id,
            GatheringType.created_by == user.id,
            GatheringType.church_id == user.church_id,
        ),
    )
    gathering = result.scalar_one_or_none()
    if gathering is None:
        raise ResourceNotFoundError("Gathering not found or access denied.")
    return gathering


async def delete_gathering(db: AsyncSession, user: User, gathering_id: int) -> None:
    await get_created_gathering(db, user, gathering_id)
    await delete_gathering_cascade(db, user.church_id, gathering_id)
    await db.commit()
    logger.info(
        "Gathering deleted",
        extra={"church_id": user.church_id, "gathering_id": gathering_id},
    )
