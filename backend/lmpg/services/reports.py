"""Reports Service — loads per-session counts and hands them to core/dashboard_metrics."""

from datetime import date, timedelta

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.core.dashboard_metrics import SessionCounts, compute_dashboard_metrics
from lmpg.models.attendance import AttendanceRecord, AttendanceSession
from lmpg.models.gathering_list import GatheringList
from lmpg.models.individual import Individual


async def session_counts(
    db: AsyncSession, church_id: str, since: date, gathering_id: int | None,
) -> list[SessionCounts]:
    present = func.count(func.distinct(case(
        (AttendanceRecord.present.is_(True), AttendanceRecord.individual_id),
    )))
    absent = func.count(func.distinct(case(
        (AttendanceRecord.present.is_(False), AttendanceRecord.individual_id),
    )))
    query = (
        select(AttendanceSession.session_date, present, absent)
        .outerjoin(AttendanceRecord, AttendanceRecord.session_id == AttendanceSession.id)
        .where(
            AttendanceSession.church_id == church_id,
            AttendanceSession.session_date >= since,
        )
        .group_by(AttendanceSession.id, AttendanceSession.session_date)
        .order_by(AttendanceSession.session_date.desc())
    )
    if gathering_id is not None:
        query = query.where(AttendanceSession.gathering_type_id == gathering_id)
    result = await db.execute(query)
    return [
        SessionCounts(session_date, present or 0, absent or 0)
        for session_date, present, absent in result.all()
    ]


async def count_individuals(
    db: AsyncSession, church_id: str, gathering_id: int | None,
) -> int:
    query = select(func.count(func.distinct(Individual.id))).where(
        Individual.church_id == church_id, Individual.is_active.is_(True),
    )
    if gathering_id is not None:
        query = query.join(
            GatheringList, GatheringList.individual_id == Individual.id,
        ).where(GatheringList.gathering_type_id == gathering_id)
    return (await db.execute(query)).scalar_one()


async def dashboard_metrics(
    db: AsyncSession,
    church_id: str,
    weeks: int,
    gathering_id: int | None = None,
    today: date | None = None,
) -> dict:
    since = (today or date.today()) - timedelta(weeks=weeks)
    sessions = await session_counts(db, church_id, since, gathering_id)
    total = await count_individuals(db, church_id, gathering_id)
    return compute_dashboard_metrics(sessions, total)
