"""SQL Migration Runner — tests against a real (in-memory) database.

Invariants:
    - Files apply in filename order and only .sql files count
    - Success records and statements commit together
    - A failure rolls back its statements and leaves one failed record
    - A failed version can be re-run once the file is fixed
"""

import pytest
from sqlalchemy import func, select

from lmpg.core.errors import (
    BusinessRuleError, MigrationExecutionError, ResourceNotFoundError,
)
from lmpg.infrastructure.migration_runner import SqlMigrationRunner
from lmpg.models import Family, Migration

FAILING = (
    "INSERT INTO families (church_id, family_name, created_at) "
    "VALUES ('church-a', 'Grace Fellowship', '2026-01-01 00:00:00');\n"
    "INSERT INTO missing_table VALUES (1);\n"
)


@pytest.fixture
def runner(test_db, tmp_path):
    return SqlMigrationRunner(test_db, tmp_path)


async def _records(test_db) -> list[Migration]:
    query = select(Migration).order_by(Migration.version).execution_options(
        populate_existing=True,
    )
    return (await test_db.execute(query)).scalars().all()


def test_available_sorted_sql_only(runner, tmp_path):
    (tmp_path / "010_b.sql").write_text("SELECT 1;")
    (tmp_path / "002_a.sql").write_text("SELECT 1;")
    (tmp_path / "notes.txt").write_text("")

    assert [m.version for m in runner.available()] == ["002_a", "010_b"]


def test_available_skips_names_too_long_to_record(runner, tmp_path):
    (tmp_path / "001_ok.sql").write_text("SELECT 1;")
    (tmp_path / f"002_{'x' * 60}.sql").write_text("SELECT 1;")

    assert [m.version for m in runner.available()] == ["001_ok"]


def test_available_with_missing_directory(test_db, tmp_path):
    assert SqlMigrationRunner(test_db, tmp_path / "nope").available() == []


@pytest.mark.parametrize("version", ["../secrets", "missing", "a b", "x" * 51])
def test_find_rejects_bad_or_missing_versions(runner, version):
    with pytest.raises(ResourceNotFoundError):
        runner.find(version)


async def test_run_success(runner, tmp_path, test_db):
    (tmp_path / "001_notes.sql").write_text(
        "-- Notes\nCREATE TABLE notes (id INTEGER PRIMARY KEY);\n"
        "INSERT INTO notes (id) VALUES (1);",
    )

    result = await runner.run("001_notes")

    assert result["message"] == "Migration executed successfully"
    [record] = await _records(test_db)
    assert (record.status, record.description, record.name) == ("success", "Notes", "001_notes.sql")
    count = await test_db.execute(select(func.count()).select_from(Family))
    assert count.scalar_one() == 0


async def test_run_twice_rejected(runner, tmp_path):
    (tmp_path / "001_notes.sql").write_text("CREATE TABLE notes (id INTEGER);")
    await runner.run("001_notes")

    with pytest.raises(BusinessRuleError) as exc_info:
        await runner.run("001_notes")
    assert exc_info.value.code == "MIGRATION_ALREADY_EXECUTED"


async def test_failure_rolls_back_and_can_be_retried(runner, tmp_path, test_db):
    path = tmp_path / "002_fix.sql"
    path.write_text(FAILING)

    with pytest.raises(MigrationExecutionError) as exc_info:
        await runner.run("002_fix")

    assert "missing_table" in exc_info.value.reason
    families = await test_db.execute(select(func.count()).select_from(Family))
    assert families.scalar_one() == 0
    [record] = await _records(test_db)
    assert record.status == "failed"

    path.write_text("CREATE TABLE fixed (id INTEGER);")
    await runner.run("002_fix")

    [record] = await _records(test_db)
    assert record.status == "success"
    assert record.error_message is None


async def test_status_counts(runner, tmp_path):
    (tmp_path / "001_ok.sql").write_text("CREATE TABLE ok (id INTEGER);")
    (tmp_path / "002_bad.sql").write_text(FAILING)
    (tmp_path / "003_later.sql").write_text("CREATE TABLE later (id INTEGER);")
    await runner.run("001_ok")
    with pytest.raises(MigrationExecutionError):
        await runner.run("002_bad")

    status = await runner.status()

    assert [m["status"] for m in status["migrations"]] == ["success", "failed", "pending"]
    assert status["pending_count"] == 1
    assert status["failed_count"] == 1
    assert status["has_pending"] and status["has_failed"]
    assert status["migrations"][2]["description"] == "Migration 003_later"


async def test_run_all_skips_recorded_versions(runner, tmp_path):
    (tmp_path / "001_ok.sql").write_text("CREATE TABLE ok (id INTEGER);")
    (tmp_path / "002_bad.sql").write_text(FAILING)
    await runner.run_all()
    (tmp_path / "003_new.sql").write_text("CREATE TABLE new_one (id INTEGER);")

    result = await runner.run_all()

    assert [r["version"] for r in result["results"]] == ["003_new"]
    assert result["success_count"] == 1
    assert result["failure_count"] == 0
