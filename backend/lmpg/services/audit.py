"""Audit Trail — writes one audit_log row per successful mutating request.

Invariants:
    - Called after the request's own unit of work has committed
    - A failed audit write is rolled back and logged; it never fails the request
"""

import logging

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.models.audit_log import AuditLog
from lmpg.models.user import User

logger = logging.getLogger(__name__)


def _client_ip(request: Request | None) -> str | None:
    if request is None:
        return None
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


async def record_audit(
    db: AsyncSession,
    user: User,
    action: str,
    request: Request | None = None,
    entity_type: str | None = None,
    entity_id: int | None = None,
    new_values: dict | None = None,
) -> None:
    church_id, user_id = user.church_id, user.id
    try:
        db.add(AuditLog(
            church_id=church_id,
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            new_values=new_values,
            ip_address=_client_ip(request),
            user_agent=request.headers.get("user-agent") if request else None,
        ))
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(
            f"Audit log write failed for {action}: {e}",
            extra={"church_id": church_id, "user_id": user_id},
        )
