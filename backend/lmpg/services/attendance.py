"""Attendance Service — roll-call roster for a date and upsert of presence flags.

Invariants:
    - One session per (gathering, date); created on first save
    - One record per (session, individual); saving again updates `present`
    - Only individuals on the gathering's list may be recorded
"""

import logging
from datetime import date

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.core.errors import ResourceNotFoundError, ValidationFailedError
from lmpg.models.attendance import AttendanceRecord, AttendanceSession
from lmpg.models.family import Family
from lmpg.models.gathering_list import GatheringList
from lmpg.models.individual import Individual
from lmpg.models.user import User
from lmpg.schemas.attendance import AttendanceEntry
from lmpg.services.gatherings import get_gathering

logger = logging.getLogger(__name__)


async def _find_session(
    db: AsyncSession, church_id: str, gathering_id: int, session_date: date,
) -> AttendanceSession | None:
    result = await db.execute(
        select(AttendanceSession).where(
            AttendanceSession.church_id == church_id,
            AttendanceSession.gathering_type_id == gathering_id,
            AttendanceSession.session_date == session_date,
        ),
    )
    return result.scalar_one_or_none()


async def attendance_list(
    db: AsyncSession,
    church_id: str,
    gathering_id: int,
    session_date: date,
    search: str | None = None,
) -> dict:
    if await get_gathering(db, church_id, gathering_id) is None:
        raise ResourceNotFoundError("Gathering not found")
    session = await _find_session(db, church_id, gathering_id, session_date)
    session_id = session.id if session else None

    query = (
        select(
            Individual.id, Individual.first_name, Individual.last_name,
            Individual.people_type, Family.family_name, Family.id.label("family_id"),
            AttendanceRecord.present,
        )
        .join(GatheringList, GatheringList.individual_id == Individual.id)
        .outerjoin(Family, Individual.family_id == Family.id)
        .outerjoin(
            AttendanceRecord,
            (AttendanceRecord.individual_id == Individual.id)
            & (AttendanceRecord.session_id == session_id),
        )
        .where(
            GatheringList.gathering_type_id == gathering_id,
            GatheringList.church_id == church_id,
            Individual.is_active.is_(True),
        )
        .order_by(Individual.last_name, Individual.first_name)
    )
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.where(or_(
            Individual.first_name.ilike(term),
            Individual.last_name.ilike(term),
            Family.family_name.ilike(term),
        ))
    result = await db.execute(query)
    rows = []
    for row in result.all():
        entry = dict(row._mapping)
        entry["present"] = bool(entry["present"])
        rows.append(entry)
    return {"session_id": session_id, "attendance_list": rows}


async def record_attendance(
    db: AsyncSession,
    user: User,
    gathering_id: int,
    session_date: date,
    entries: list[AttendanceEntry],
) -> AttendanceSession:
    if await get_gathering(db, user.church_id, gathering_id) is None:
        raise ResourceNotFoundError("Gathering not found")

    roster = await db.execute(
        select(GatheringList.individual_id).where(
            GatheringList.gathering_type_id == gathering_id,
            GatheringList.church_id == user.church_id,
        ),
    )
    on_list = set(roster.scalars().all())
    unknown = [e.individual_id for e in entries if e.individual_id not in on_list]
    if unknown:
        raise ValidationFailedError(
            f"Individuals not on this gathering list: {unknown}", "attendanceRecords",
        )

    session = await _find_session(db, user.church_id, gathering_id, session_date)
    if session is None:
        session = AttendanceSession(
            church_id=user.church_id, gathering_type_id=gathering_id,
            session_date=session_date, created_by=user.id,
        )
        db.add(session)
        await db.flush()

    existing = await db.execute(
        select(AttendanceRecord).where(AttendanceRecord.session_id == session.id),
    )
    records = {r.individual_id: r for r in existing.scalars().all()}
    for entry in entries:
        record = records.get(entry.individual_id)
        if record is None:
            record = AttendanceRecord(
                church_id=user.church_id, session_id=session.id,
                individual_id=entry.individual_id, present=entry.present,
            )
            db.add(record)
            records[entry.individual_id] = record
        else:
            record.present = entry.present
    await db.commit()
    logger.info(
        f"Attendance recorded for {session_date.isoformat()}: {len(entries)} entries",
        extra={"church_id": user.church_id, "gathering_id": gathering_id},
    )
    return session
