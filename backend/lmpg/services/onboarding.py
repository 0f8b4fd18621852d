"""Onboarding Service — church settings, first gathering and first roster.

Invariants:
    - church_settings has at most one row per church (upsert)
    - The wizard's first gathering is assigned to its creator and seeded with
      sample sessions on the previous four occurrences of its weekday
    - Only the creating admin may import into or delete a wizard gathering
"""

import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.config import Settings
from lmpg.core.domain_types import AttendanceType, DayOfWeek
from lmpg.core.roster_parser import ParsedRoster
from lmpg.core.schedule import sample_session_dates
from lmpg.models.attendance import AttendanceSession
from lmpg.models.church_settings import ChurchSettings
from lmpg.models.gathering_type import GatheringType
from lmpg.models.user import User
from lmpg.models.user_gathering_assignment import UserGatheringAssignment
from lmpg.schemas.onboarding import ChurchInfo, OnboardingGathering
from lmpg.services.gatherings import delete_gathering_cascade, get_created_gathering
from lmpg.services.onboarding_progress import get_onboarding_progress
from lmpg.services.roster_import import RosterImporter

logger = logging.getLogger(__name__)


async def get_church_settings(db: AsyncSession, church_id: str) -> ChurchSettings | None:
    result = await db.execute(
        select(ChurchSettings).where(ChurchSettings.church_id == church_id),
    )
    return result.scalar_one_or_none()


async def onboarding_status(db: AsyncSession, user: User) -> dict:
    settings = await get_church_settings(db, user.church_id)
    progress = await get_onboarding_progress(db, user.id)
    return {
        "completed": bool(settings and settings.onboarding_completed),
        "settings": settings.as_dict() if settings else None,
        "progress": progress.as_dict() if progress else None,
    }


async def save_church_info(
    db: AsyncSession, user: User, info: ChurchInfo, defaults: Settings,
) -> ChurchSettings:
    settings = await get_church_settings(db, user.church_id)
    if settings is None:
        settings = ChurchSettings(church_id=user.church_id)
        db.add(settings)
    settings.church_name = info.church_name
    settings.country_code = info.country_code.upper()
    settings.timezone = info.timezone or defaults.default_timezone
    settings.email_from_name = info.email_from_name or defaults.default_email_from_name
    settings.email_from_address = (
        str(info.email_from_address) if info.email_from_address
        else defaults.default_email_from_address
    )
    await db.commit()
    logger.info("Church settings saved", extra={"church_id": user.church_id})
    return settings


async def create_first_gathering(
    db: AsyncSession, user: User, data: OnboardingGathering, today: date | None = None,
) -> GatheringType:
    gathering = GatheringType(
        church_id=user.church_id,
        name=data.name,
        description=data.description,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        duration_minutes=data.duration_minutes,
        frequency=data.frequency,
        attendance_type=AttendanceType.STANDARD.value,
        created_by=user.id,
    )
    db.add(gathering)
    await db.flush()
    db.add(UserGatheringAssignment(
        church_id=user.church_id, user_id=user.id,
        gathering_type_id=gathering.id, assigned_by=user.id,
    ))
    for session_date in sample_session_dates(
        DayOfWeek(data.day_of_week), today or date.today(),
    ):
        db.add(AttendanceSession(
            church_id=user.church_id, gathering_type_id=gathering.id,
            session_date=session_date, created_by=user.id,
        ))
    await db.commit()
    logger.info(
        f"Onboarding gathering created: {gathering.name}",
        extra={"church_id": user.church_id, "gathering_id": gathering.id},
    )
    return gathering


async def assigned_gatherings_snapshot(db: AsyncSession, user: User) -> list[dict]:
    """The user's gatherings as stored in onboarding_progress.gatherings."""
    result = await db.execute(
        select(
            GatheringType.id, GatheringType.name, GatheringType.description,
            GatheringType.day_of_week, GatheringType.start_time,
            GatheringType.duration_minutes, GatheringType.frequency,
        )
        .join(
            UserGatheringAssignment,
            UserGatheringAssignment.gathering_type_id == GatheringType.id,
        )
        .where(
            UserGatheringAssignment.user_id == user.id,
            GatheringType.church_id == user.church_id,
        )
        .order_by(GatheringType.name),
    )
    return [dict(row._mapping) for row in result.all()]


async def delete_first_gathering(db: AsyncSession, user: User, gathering_id: int) -> None:
    await get_created_gathering(db, user, gathering_id)
    await delete_gathering_cascade(db, user.church_id, gathering_id)
    await db.commit()


async def import_first_roster(
    db: AsyncSession, user: User, gathering_id: int, parsed: ParsedRoster,
) -> dict:
    """Import every usable row as a new person on the wizard gathering."""
    await get_created_gathering(db, user, gathering_id)
    outcome = await RosterImporter(
        db, user, gathering_id, check_duplicates=False,
    ).run(parsed.rows, parsed.skipped)
    await db.commit()
    return {
        "message": f"Successfully imported {len(outcome.imported)} individuals",
        "imported": len(outcome.imported),
        "families": len(outcome.families),
        "gathering_id": gathering_id,
    }


async def complete_onboarding(db: AsyncSession, user: User) -> None:
    await db.execute(
        update(ChurchSettings)
        .where(ChurchSettings.church_id == user.church_id)
        .values(onboarding_completed=True),
    )
    await db.commit()
    logger.info("Onboarding completed", extra={"church_id": user.church_id})
