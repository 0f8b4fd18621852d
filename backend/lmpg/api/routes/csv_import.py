"""Roster import routes — /api/csv-import.

Uploads and pastes here check for duplicates against the whole church,
unlike the onboarding wizard which imports every row as a new person.
"""

from fastapi import APIRouter, Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import require_gathering_access, require_manager
from lmpg.api.routes.onboarding import csv_template_response
from lmpg.api.uploads import read_csv_upload
from lmpg.config import Settings, get_settings
from lmpg.core.case_convert import to_camel_keys
from lmpg.core.errors import ValidationFailedError
from lmpg.core.roster_parser import parse_loose_paste, read_csv_records, roster_from_records
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.schemas.imports import IndividualIds, PastedRoster
from lmpg.services.audit import record_audit
from lmpg.services import roster_import as service
from lmpg.services.roster_import import RosterImporter

router = APIRouter(prefix="/api/csv-import", tags=["csv-import"])


@router.post(
    "/upload/{gathering_id}", dependencies=[Depends(require_gathering_access)],
)
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
    parsed = roster_from_records(records)
    outcome = await RosterImporter(db, user, gathering_id).run(parsed.rows, parsed.skipped)
    await db.commit()
    summary = to_camel_keys(outcome.summary())
    await record_audit(
        db, user, "CSV_UPLOAD", request,
        entity_type="gathering_type", entity_id=gathering_id,
        new_values={"imported": summary["imported"], "duplicates": summary["duplicates"]},
    )
    return summary


@router.get("/template")
async def template():
    return csv_template_response()


async def _import_paste(
    db: AsyncSession, user: User, request: Request, data: str, gathering_id: int | None,
) -> dict:
    parsed = parse_loose_paste(data)
    if not parsed.rows:
        raise ValidationFailedError("No valid data found", "data")
    outcome = await RosterImporter(db, user, gathering_id).run(parsed.rows)
    await db.commit()
    summary = to_camel_keys(outcome.summary())
    summary["assignedToService"] = gathering_id is not None
    await record_audit(
        db, user, "COPY_PASTE_IMPORT", request,
        entity_type="gathering_type", entity_id=gathering_id,
        new_values={"imported": summary["imported"], "duplicates": summary["duplicates"]},
    )
    return summary


@router.post("/copy-paste")
async def copy_paste(
    body: PastedRoster,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await _import_paste(db, user, request, body.data, None)


@router.post(
    "/copy-paste/{gathering_id}", dependencies=[Depends(require_gathering_access)],
)
async def copy_paste_to_gathering(
    gathering_id: int,
    body: PastedRoster,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    return await _import_paste(db, user, request, body.data, gathering_id)


@router.post(
    "/mass-assign/{gathering_id}", dependencies=[Depends(require_gathering_access)],
)
async def mass_assign(
    gathering_id: int,
    body: IndividualIds,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    results = await service.mass_assign(db, user, gathering_id, body.individual_ids)
    await record_audit(
        db, user, "MASS_ASSIGN_TO_SERVICE", request,
        entity_type="gathering_type", entity_id=gathering_id,
        new_values={"individualIds": body.individual_ids},
    )
    return to_camel_keys({"message": "Mass assignment completed", **results})


@router.delete(
    "/mass-remove/{gathering_id}", dependencies=[Depends(require_gathering_access)],
)
async def mass_remove(
    gathering_id: int,
    body: IndividualIds,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    removed = await service.mass_remove(db, user, gathering_id, body.individual_ids)
    await record_audit(
        db, user, "MASS_REMOVE_FROM_SERVICE", request,
        entity_type="gathering_type", entity_id=gathering_id,
        new_values={"individualIds": body.individual_ids},
    )
    return {"message": "Mass removal completed", "removed": removed}
