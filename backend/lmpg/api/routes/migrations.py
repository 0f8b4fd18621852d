"""Migration routes — /api/migrations, admin-only control of operator SQL files.

Design Decisions:
    - The runner gets its own session from db_manager: a failed migration
      rolls back that session only, never the request's (which holds the
      authenticated user)
"""

from typing import AsyncGenerator

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.api.dependencies import require_admin
from lmpg.config import Settings, get_settings
from lmpg.core.case_convert import to_camel_keys
from lmpg.infrastructure.database import get_db, get_db_manager
from lmpg.infrastructure.migration_runner import SqlMigrationRunner
from lmpg.models.user import User
from lmpg.services.audit import record_audit

router = APIRouter(prefix="/api/migrations", tags=["migrations"])


async def get_migration_runner(
    settings: Settings = Depends(get_settings),
) -> AsyncGenerator[SqlMigrationRunner, None]:
    async with get_db_manager().session() as session:
        yield SqlMigrationRunner(session, settings.migrations_dir)


@router.get("/status")
async def migration_status(
    user: User = Depends(require_admin),
    runner: SqlMigrationRunner = Depends(get_migration_runner),
):
    return to_camel_keys(await runner.status())


@router.post("/run/{version}")
async def run_migration(
    version: str,
    request: Request,
    user: User = Depends(require_admin),
    runner: SqlMigrationRunner = Depends(get_migration_runner),
    db: AsyncSession = Depends(get_db),
):
    result = await runner.run(version)
    await record_audit(
        db, user, "RUN_MIGRATION", request,
        entity_type="migration", new_values={"version": version},
    )
    return to_camel_keys(result)


@router.post("/run-all")
async def run_all_migrations(
    request: Request,
    user: User = Depends(require_admin),
    runner: SqlMigrationRunner = Depends(get_migration_runner),
    db: AsyncSession = Depends(get_db),
):
    result = await runner.run_all()
    if "results" in result:
        await record_audit(
            db, user, "RUN_ALL_MIGRATIONS", request,
            entity_type="migration",
            new_values={
                "successCount": result["success_count"],
                "failureCount": result["failure_count"],
            },
        )
    return to_camel_keys(result)
