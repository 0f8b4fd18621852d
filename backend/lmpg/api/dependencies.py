"""Request Dependencies — authentication, role checks and gathering access.

Invariants:
    - A request is authenticated by an HS256 JWT from the Authorization
      header (Bearer) or the authToken cookie
    - The token's `sub` (or legacy `userId`) claim names an active user
      who belongs to a church
    - Admins may access every gathering in their church; other roles only
      gatherings they are assigned to
"""

import logging

import jwt
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.config import Settings, get_settings
from lmpg.core.domain_types import Role
from lmpg.core.errors import (
    AuthenticationError, ErrorContext, PermissionDeniedError,
)
from lmpg.infrastructure.database import get_db
from lmpg.models.user import User
from lmpg.services.gatherings import is_assigned

logger = logging.getLogger(__name__)

AUTH_COOKIE = "authToken"


def _extract_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(AUTH_COOKIE)


def _user_id_from_claims(claims: dict) -> int:
    raw = claims.get("sub") or claims.get("userId")
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token.", code="INVALID_TOKEN")


async def get_current_user(
    request: Request,
    db: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> User:
    token = _extract_token(request)
    if not token:
        raise AuthenticationError()
    try:
        claims = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("Token expired.", code="TOKEN_EXPIRED")
    except jwt.InvalidTokenError as e:
        logger.warning(f"Rejected token on {request.url.path}: {e}")
        raise AuthenticationError("Invalid token.", code="INVALID_TOKEN")

    user = await db.get(User, _user_id_from_claims(claims))
    if user is None or not user.is_active:
        raise AuthenticationError(
            "Invalid token or user not found.", code="USER_NOT_FOUND",
        )
    if not user.church_id:
        raise PermissionDeniedError("User is not associated with a church.")
    request.state.church_id = user.church_id
    request.state.user_id = user.id
    return user


def require_role(*roles: Role):
    """Dependency factory: the current user must hold one of `roles`."""
    allowed = {r.value for r in roles}

    async def check_role(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            logger.warning(
                f"Role {user.role} denied; needs one of {sorted(allowed)}",
                extra={"church_id": user.church_id, "user_id": user.id},
            )
            raise PermissionDeniedError()
        return user

    return check_role


async def require_gathering_access(
    gathering_id: int,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> User:
    if user.role == Role.ADMIN.value:
        return user
    if not await is_assigned(db, user, gathering_id):
        raise PermissionDeniedError(
            "You do not have access to this gathering.",
            context=ErrorContext(
                church_id=user.church_id, user_id=user.id, gathering_id=gathering_id,
            ),
        )
    return user


require_admin = require_role(Role.ADMIN)
require_manager = require_role(Role.ADMIN, Role.COORDINATOR)
