"""SQL Migration Runner — applies operator-supplied `.sql` files and records outcomes.

Invariants:
    - Files are applied in filename order; version = filename without `.sql`
    - Statements and the success record commit in one transaction
    - A failed run is rolled back and leaves exactly one `failed` record
    - A version with no record is pending; failed versions may be re-run

Design Decisions:
    - Runs on an AsyncSession so the API (request session) and the CLI
      (db_manager.session()) share one code path
    - Statements go through exec_driver_sql: migration SQL is never parsed
      for bind parameters
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from lmpg.core.domain_types import MigrationStatus
from lmpg.core.errors import (
    BusinessRuleError, MigrationExecutionError, ResourceNotFoundError,
)
from lmpg.core.sql_script import (
    describe_migration, is_valid_version, split_statements, version_from_filename,
)
from lmpg.models.migration import Migration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MigrationFile:
    version: str
    path: Path

    @property
    def name(self) -> str:
        return self.path.name

    def read(self) -> str:
        return self.path.read_text(encoding="utf-8")


class SqlMigrationRunner:
    """Lists, applies and records SQL migration files from one directory."""

    def __init__(self, db: AsyncSession, migrations_dir: str | Path):
        self.db = db
        self.migrations_dir = Path(migrations_dir)

    def available(self) -> list[MigrationFile]:
        if not self.migrations_dir.is_dir():
            logger.warning(f"Migrations directory not found: {self.migrations_dir}")
            return []
        files = []
        for p in sorted(self.migrations_dir.glob("*.sql")):
            version = version_from_filename(p.name)
            if not is_valid_version(version):
                logger.warning(f"Skipping migration file with invalid name: {p.name}")
                continue
            files.append(MigrationFile(version, p))
        return files

    def find(self, version: str) -> MigrationFile:
        if not is_valid_version(version):
            raise ResourceNotFoundError("Migration file not found")
        path = self.migrations_dir / f"{version}.sql"
        if not path.is_file():
            raise ResourceNotFoundError("Migration file not found")
        return MigrationFile(version, path)

    async def ensure_table(self) -> None:
        conn = await self.db.connection()
        await conn.run_sync(
            lambda sync_conn: Migration.__table__.create(sync_conn, checkfirst=True),
        )
        await self.db.commit()

    async def _records(self) -> dict[str, Migration]:
        result = await self.db.execute(select(Migration))
        return {m.version: m for m in result.scalars().all()}

    async def status(self) -> dict:
        """Every migration file with its recorded outcome, plus summary counts."""
        await self.ensure_table()
        records = await self._records()
        migrations = []
        for mf in self.available():
            record = records.get(mf.version)
            migrations.append({
                "version": mf.version,
                "name": mf.name,
                "description": describe_migration(mf.version, mf.read()),
                "executed": record is not None,
                "executed_at": record.executed_at if record else None,
                "status": record.status if record else MigrationStatus.PENDING.value,
                "error_message": record.error_message if record else None,
            })
        pending = [m for m in migrations if not m["executed"]]
        failed = [m for m in migrations if m["status"] == MigrationStatus.FAILED.value]
        return {
            "migrations": migrations,
            "pending_count": len(pending),
            "failed_count": len(failed),
            "has_pending": bool(pending),
            "has_failed": bool(failed),
        }

    async def run(self, version: str) -> dict:
        """Apply one migration file. Raises MigrationExecutionError on SQL failure."""
        mf = self.find(version)
        await self.ensure_table()
        records = await self._records()
        existing = records.get(version)
        if existing and existing.status == MigrationStatus.SUCCESS.value:
            raise BusinessRuleError(
                "Migration already executed", code="MIGRATION_ALREADY_EXECUTED",
            )

        sql = mf.read()
        description = describe_migration(version, sql)
        started = time.perf_counter()
        try:
            await self.db.execute(delete(Migration).where(Migration.version == version))
            conn = await self.db.connection()
            for statement in split_statements(sql):
                await conn.exec_driver_sql(statement)
            elapsed = _elapsed_ms(started)
            self.db.add(Migration(
                version=version, name=mf.name, description=description,
                execution_time_ms=elapsed, status=MigrationStatus.SUCCESS.value,
            ))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            elapsed = _elapsed_ms(started)
            reason = str(getattr(e, "orig", None) or e)
            await self._record_failure(mf, description, elapsed, reason)
            logger.error(
                f"Migration {version} failed: {reason}",
                extra={"migration_version": version, "execution_time_ms": elapsed},
            )
            raise MigrationExecutionError(version, reason) from e

        logger.info(
            f"Migration {version} executed",
            extra={"migration_version": version, "execution_time_ms": elapsed},
        )
        return {
            "message": "Migration executed successfully",
            "version": version,
            "execution_time": elapsed,
        }

    async def _record_failure(
        self, mf: MigrationFile, description: str, elapsed: int, reason: str,
    ) -> None:
        await self.db.execute(delete(Migration).where(Migration.version == mf.version))
        self.db.add(Migration(
            version=mf.version, name=mf.name, description=description,
            execution_time_ms=elapsed, status=MigrationStatus.FAILED.value,
            error_message=reason,
        ))
        await self.db.commit()

    async def run_all(self) -> dict:
        """Apply every pending migration in order, continuing past failures."""
        await self.ensure_table()
        records = await self._records()
        pending = [mf for mf in self.available() if mf.version not in records]
        if not pending:
            return {"message": "No pending migrations"}

        results = []
        success_count = failure_count = 0
        for mf in pending:
            try:
                outcome = await self.run(mf.version)
                results.append({
                    "version": mf.version,
                    "status": MigrationStatus.SUCCESS.value,
                    "execution_time": outcome["execution_time"],
                })
                success_count += 1
            except MigrationExecutionError as e:
                results.append({
                    "version": mf.version,
                    "status": MigrationStatus.FAILED.value,
                    "error": e.reason,
                })
                failure_count += 1
        return {
            "message": (
                f"Executed {success_count} migrations successfully, "
                f"{failure_count} failed"
            ),
            "results": results,
            "success_count": success_count,
            "failure_count": failure_count,
        }


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)
