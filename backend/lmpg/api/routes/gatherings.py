"""Gathering routes — /api/gatherings.

Invariants:
    - Every route requires an authenticated user; writes need admin or coordinator
    - Successful writes are audited after commit
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import get_current_user, require_admin, require_manager
from lmpg.core.case_convert import to_camel_keys
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.schemas.gathering import GatheringCreate, GatheringDuplicate, GatheringUpdate
from lmpg.services import gatherings as service
from lmpg.services.audit import record_audit

router = APIRouter(prefix="/api/gatherings", tags=["gatherings"])


@router.get("")
async def list_gatherings(
    user: User = Depends(get_current_user), db: AsyncSession = Depends(get_db),
):
    """Active gatherings with member and recent visitor counts."""
    return to_camel_keys({"gatherings": await service.list_gatherings(db, user)})


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_gathering(
    body: GatheringCreate,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    gathering = await service.create_gathering(db, user, body)
    await record_audit(
        db, user, "CREATE_GATHERING_TYPE", request,
        entity_type="gathering_type", entity_id=gathering.id,
        new_values=body.model_dump(mode="json", by_alias=True),
    )
    return {
        "message": "Gathering type created successfully",
        "id": gathering.id,
        "setAsDefault": body.set_as_default,
    }


@router.put("/{gathering_id}")
async def update_gathering(
    gathering_id: int,
    body: GatheringUpdate,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    await service.update_gathering(db, user, gathering_id, body)
    await record_audit(
        db, user, "UPDATE_GATHERING_TYPE", request,
        entity_type="gathering_type", entity_id=gathering_id,
        new_values=body.model_dump(mode="json", by_alias=True),
    )
    return {"message": "Gathering updated successfully", "id": gathering_id}


@router.get("/{gathering_id}/members")
async def list_members(
    gathering_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    members = await service.list_members(db, user.church_id, gathering_id)
    return to_camel_keys({"members": members})


@router.post("/{gathering_id}/duplicate", status_code=status.HTTP_201_CREATED)
async def duplicate_gathering(
    gathering_id: int,
    body: GatheringDuplicate,
    request: Request,
    user: User = Depends(require_manager),
    db: AsyncSession = Depends(get_db),
):
    gathering = await service.duplicate_gathering(db, user, gathering_id, body.name)
    await record_audit(
        db, user, "DUPLICATE_GATHERING_TYPE", request,
        entity_type="gathering_type", entity_id=gathering["id"],
        new_values={"sourceId": gathering_id, "name": gathering["name"]},
    )
    return to_camel_keys({
        "message": "Gathering duplicated successfully.",
        "gathering": gathering,
    })


@router.delete("/{gathering_id}")
async def delete_gathering(
    gathering_id: int,
    request: Request,
    user: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await service.delete_gathering(db, user, gathering_id)
    await record_audit(
        db, user, "DELETE_GATHERING_TYPE", request,
        entity_type="gathering_type", entity_id=gathering_id,
    )
    return {"message": "Gathering deleted successfully."}
