"""Attendance routes — /api/attendance/{gathering_id}/{date}."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import require_gathering_access
from lmpg.core.case_convert import to_camel_keys
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.schemas.attendance import AttendanceSubmission
from lmpg.services import attendance as service
from lmpg.services.audit import record_audit

router = APIRouter(prefix="/api/attendance", tags=["attendance"])


@router.get("/{gathering_id}/{session_date}")
async def get_attendance(
    gathering_id: int,
    session_date: date,
    search: str | None = Query(None),
    user: User = Depends(require_gathering_access),
    db: AsyncSession = Depends(get_db),
):
    result = await service.attendance_list(
        db, user.church_id, gathering_id, session_date, search,
    )
    return to_camel_keys(result)


@router.post("/{gathering_id}/{session_date}")
async def record_attendance(
    gathering_id: int,
    session_date: date,
    body: AttendanceSubmission,
    request: Request,
    user: User = Depends(require_gathering_access),
    db: AsyncSession = Depends(get_db),
):
    session = await service.record_attendance(
        db, user, gathering_id, session_date, body.attendance_records,
    )
    await record_audit(
        db, user, "RECORD_ATTENDANCE", request,
        entity_type="attendance_session", entity_id=session.id,
        new_values=body.model_dump(mode="json", by_alias=True),
    )
    return {"message": "Attendance recorded successfully", "sessionId": session.id}
