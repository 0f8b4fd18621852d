"""Onboarding routes — /api/onboarding, the first-run setup wizard.

Invariants:
    - Admin only, except roster import (admin or coordinator) and the public template
    - Each step saves wizard progress after its own work has committed;
      a progress failure never fails the step
"""

from fastapi import APIRouter, Depends, File, Request, UploadFile
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import require_admin, require_manager
from lmpg.api.uploads import read_csv_upload
from lmpg.config import Settings, get_settings
from lmpg.core.case_convert import to_camel_keys
from lmpg.core.countries import supported_countries
from lmpg.core.domain_types import OnboardingStep
from lmpg.core.errors import ValidationFailedError
from lmpg.core.roster_parser import (
    TEMPLATE_CSV, parse_spreadsheet_paste, read_csv_records, roster_from_records,
)
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.schemas.imports import PastedRoster
from lmpg.schemas.onboarding import ChurchInfo, OnboardingGathering, SaveProgress
from lmpg.services import onboarding as service
from lmpg.services.audit import record_audit
from lmpg.services.onboarding_progress import save_onboarding_progress

router = APIRouter(prefix="/api/onboarding", tags=["onboarding"])

TEMPLATE_FILENAME = "attendance_import_template.csv"


def csv_template_response() -> Response:
    return Response(
        content=TEMPLATE_CSV,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{TEMPLATE_FILENAME}"'},
    )


@router.get("/status")
async def onboarding_status(
    user: User = Depends(require_admin), db: AsyncSession = Depends(get_db),
):
    return to_camel_keys(await service.onboarding_status(db, user))


@router.get("/countries")
async def countries(user: User = Depends(require_admin)):
    return to_camel_keys({"countries": supported_countries()})


@router.post("/church-info")
async def save_church_info(
    body: ChurchInfo,
    request: Request,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    await service.save_church_info(db, user, body, settings)
    church_info = body.model_dump(mode="json", by_alias=True)
    await record_audit(
        db, user, "ONBOARDING_CHURCH_INFO", request,
        entity_type="church_settings", new_values=church_info,
    )
    await save_onboarding_progress(
        db, user, OnboardingStep.GATHERING.value, {"church_info": church_info},
        [OnboardingStep.CHURCH_INFO.value],
    )
    return {"message": "Church information saved successfully"}


@router.post("/gathering")
async def create_gathering(
    body: OnboardingGathering,
    request: Request,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    gathering = await service.create_first_gathering(db, user, body)
    await record_audit(
        db, user, "ONBOARDING_CREATE_GATHERING", request,
        entity_type="gathering_type", entity_id=gathering.id,
        new_values=body.model_dump(mode="json", by_alias=True),
    )
    snapshot = to_camel_keys(await service.assigned_gatherings_snapshot(db, user))
    await save_onboarding_progress(
        db, user, OnboardingStep.GATHERING.value, {"gatherings": snapshot},
    )
    return {"message": "Gathering created successfully", "gatheringId": gathering.id}


@router.delete("/gathering/{gathering_id}")
async def delete_gathering(
    gathering_id: int,
    request: Request,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_first_gathering(db, user, gathering_id)
    await record_audit(
        db, user, "ONBOARDING_DELETE_GATHERING", request,
        entity_type="gathering_type", entity_id=gathering_id,
    )
    return {"message": "Gathering deleted successfully"}


async def _finish_roster_step(
    db: AsyncSession, user: User, request: Request, action: str, result: dict,
) -> dict:
    body = to_camel_keys(result)
    await record_audit(
        db, user, action, request,
        entity_type="gathering_type", entity_id=result["gathering_id"],
        new_values=body,
    )
    await save_onboarding_progress(
        db, user, OnboardingStep.ROSTER.value, {"csv_upload": body},
        [OnboardingStep.GATHERING.value],
    )
    return body


@router.post("/upload-csv/{gathering_id}")
async def upload_csv(
    gathering_id: int,
    request: Request,
    csv_file: UploadFile | None = File(None, alias="csvFile"),
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    content = await read_csv_upload(csv_file, settings.upload_max_bytes)
    records = read_csv_records(content)
    if not records:
        raise ValidationFailedError("CSV file is empty or invalid", "csvFile")
    result = await service.import_first_roster(
        db, user, gathering_id, roster_from_records(records),
    )
    return await _finish_roster_step(db, user, request, "ONBOARDING_UPLOAD_CSV", result)


@router.post("/import-paste/{gathering_id}")
async def import_paste(
    gathering_id: int,
    body: PastedRoster,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    parsed = parse_spreadsheet_paste(body.data)
    result = await service.import_first_roster(db, user, gathering_id, parsed)
    return await _finish_roster_step(db, user, request, "ONBOARDING_IMPORT_PASTE", result)


@router.post("/complete")
async def complete(
    request: Request,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await service.complete_onboarding(db, user)
    await record_audit(db, user, "ONBOARDING_COMPLETE", request)
    await save_onboarding_progress(
        db, user, OnboardingStep.COMPLETE.value, {},
        [OnboardingStep.ROSTER.value, OnboardingStep.COMPLETE.value],
    )
    return {"message": "Onboarding completed successfully"}


@router.post("/save-progress")
async def save_progress(
    body: SaveProgress,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    data = body.data.model_dump(exclude_none=True) if body.data else {}
    await save_onboarding_progress(db, user, body.current_step, data)
    return {"message": "Progress saved successfully"}


@router.get("/csv-template")
async def csv_template():
    return csv_template_response()
