"""Report routes — /api/reports."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import require_manager
from lmpg.core.case_convert import to_camel_keys
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.services.reports import dashboard_metrics

router = APIRouter(prefix="/api/reports", tags=["reports"])


@router.get("/dashboard")
async def dashboard(
    gathering_type_id: int | None = Query(None, alias="gatheringTypeId"),
    weeks: int = Query(4, ge=1, le=104),
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    """Attendance totals, average and growth for the last `weeks` weeks."""
    metrics = await dashboard_metrics(db, user.church_id, weeks, gathering_type_id)
    return to_camel_keys({"metrics": metrics})
