"""Onboarding Progress — merge-and-save of the wizard position for one user.

Invariants:
    - completed_steps grows as an ordered set union (first-seen order kept)
    - Only JSON fields that are supplied overwrite stored values
    - Failures are logged and rolled back; callers never see them
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.models.onboarding_progress import OnboardingProgress
from lmpg.models.user import User

logger = logging.getLogger(__name__)

PROGRESS_FIELDS = ("church_info", "gatherings", "csv_upload")


def merge_completed_steps(existing: list | None, new: list[int]) -> list[int]:
    merged = list(existing or [])
    for step in new:
        if step not in merged:
            merged.append(step)
    return merged


async def get_onboarding_progress(
    db: AsyncSession, user_id: int,
) -> OnboardingProgress | None:
    result = await db.execute(
        select(OnboardingProgress).where(OnboardingProgress.user_id == user_id),
    )
    return result.scalar_one_or_none()


async def save_onboarding_progress(
    db: AsyncSession,
    user: User,
    current_step: int,
    data: dict | None = None,
    completed_steps: list[int] | None = None,
) -> None:
    data = data or {}
    completed_steps = completed_steps or []
    church_id, user_id = user.church_id, user.id
    try:
        progress = await get_onboarding_progress(db, user_id)
        if progress is None:
            progress = OnboardingProgress(
                church_id=church_id, user_id=user_id, completed_steps=[],
            )
            db.add(progress)
        progress.current_step = current_step
        for key in PROGRESS_FIELDS:
            if data.get(key):
                setattr(progress, key, data[key])
        if completed_steps:
            progress.completed_steps = merge_completed_steps(
                progress.completed_steps, completed_steps,
            )
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Save onboarding progress failed: {e}",
            extra={"church_id": church_id, "user_id": user_id},
        )
