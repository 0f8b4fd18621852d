"""Operator CLI for SQL migrations.

    python -m lmpg.migrate status
    python -m lmpg.migrate run 001_add_attendance_indexes
    python -m lmpg.migrate run-all

Exit code is 1 when any migration fails.
"""

import argparse
import asyncio
import json
import logging
import sys

from lmpg.config import get_settings
from lmpg.core.case_convert import to_camel_keys
from lmpg.core.errors import LmpgError
from lmpg.infrastructure.database import DatabaseSessionManager
from lmpg.infrastructure.migration_runner import SqlMigrationRunner
from lmpg.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="lmpg.migrate", description=__doc__.splitlines()[0])
    parser.add_argument("--dir", help="migrations directory (default: MIGRATIONS_DIR)")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("status", help="list migration files and their outcome")
    run = sub.add_parser("run", help="apply one migration")
    run.add_argument("version")
    sub.add_parser("run-all", help="apply every pending migration")
    return parser


async def execute(command: str, version: str | None, migrations_dir: str) -> dict:
    settings = get_settings()
    manager = DatabaseSessionManager(settings.database_url, pool_size=1, max_overflow=0)
    try:
        async with manager.session() as session:
            runner = SqlMigrationRunner(session, migrations_dir)
            if command == "status":
                return await runner.status()
            if command == "run":
                return await runner.run(version)
            return await runner.run_all()
    finally:
        await manager.dispose()


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        result = asyncio.run(execute(
            args.command, getattr(args, "version", None),
            args.dir or settings.migrations_dir,
        ))
    except LmpgError as e:
        print(json.dumps(e.to_response(), indent=2), file=sys.stderr)
        return 1
    print(json.dumps(to_camel_keys(result), indent=2))
    return 1 if result.get("failure_count") else 0


if __name__ == "__main__":
    sys.exit(main())
