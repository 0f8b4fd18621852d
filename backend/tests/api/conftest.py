"""API test fixtures — FastAPI test client, seeded churches and auth headers.

Invariants:
    - get_db dependency overridden to use the test database
    - db_manager patched so routes that open their own session (migrations,
      readiness) use the same database
    - Two churches are seeded so every test can check church isolation

Design Decisions:
    - Tokens are signed with the same secret the app reads from settings
    - Seeder commits every row so request sessions see it
"""

from dataclasses import dataclass
from datetime import date

import jwt
import pytest
from httpx import ASGITransport, AsyncClient

import lmpg.infrastructure.database as db_module
from lmpg.config import Settings, get_settings
from lmpg.infrastructure.database import DatabaseSessionManager, get_db
from lmpg.main import app
from lmpg.models import (
    AttendanceRecord, AttendanceSession, Family, GatheringList, GatheringType,
    Individual, User, UserGatheringAssignment,
)

CHURCH_A = "church-a"
CHURCH_B = "church-b"


@pytest.fixture
async def client(test_engine, test_session_factory):
    """FastAPI test client with DB dependency overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


@dataclass
class Church:
    admin: User
    coordinator: User
    taker: User
    other_admin: User


@pytest.fixture
async def church(test_db) -> Church:
    """Church A with one user per role, plus an admin of church B."""
    users = [
        User(church_id=CHURCH_A, email="admin@a.test", role="admin", first_name="Ada"),
        User(church_id=CHURCH_A, email="coord@a.test", role="coordinator", first_name="Cy"),
        User(church_id=CHURCH_A, email="taker@a.test", role="attendance_taker", first_name="Tam"),
        User(church_id=CHURCH_B, email="admin@b.test", role="admin", first_name="Bea"),
    ]
    test_db.add_all(users)
    await test_db.commit()
    return Church(*users)


@pytest.fixture
def auth():
    """Build Authorization headers for a user."""
    secret = get_settings().jwt_secret

    def _auth(user: User, **claims) -> dict:
        payload = {"sub": str(user.id), **claims}
        token = jwt.encode(payload, secret, algorithm="HS256")
        return {"Authorization": f"Bearer {token}"}

    return _auth


@pytest.fixture
def migrations_dir(tmp_path):
    """Point the migration routes at an empty temporary directory."""
    app.dependency_overrides[get_settings] = lambda: Settings(migrations_dir=str(tmp_path))
    yield tmp_path
    app.dependency_overrides.pop(get_settings, None)


class Seeder:
    """Insert-and-commit helpers for route tests."""

    def __init__(self, db):
        self.db = db

    async def _save(self, *objs):
        self.db.add_all(objs)
        await self.db.commit()
        return objs[0] if len(objs) == 1 else objs

    async def gathering(
        self, user: User, name: str = "Sunday Service", assign: tuple[User, ...] | None = None,
        **fields,
    ) -> GatheringType:
        values = {
            "day_of_week": "Sunday", "start_time": "10:00",
            "frequency": "weekly", "attendance_type": "standard",
        }
        values.update(fields)
        g = await self._save(GatheringType(
            church_id=user.church_id, name=name, created_by=user.id, **values,
        ))
        for assignee in (assign if assign is not None else (user,)):
            await self._save(UserGatheringAssignment(
                church_id=user.church_id, user_id=assignee.id,
                gathering_type_id=g.id, assigned_by=user.id,
            ))
        return g

    async def family(self, church_id: str, name: str) -> Family:
        return await self._save(Family(church_id=church_id, family_name=name))

    async def individual(
        self, church_id: str, first: str, last: str,
        family: Family | None = None, **fields,
    ) -> Individual:
        return await self._save(Individual(
            church_id=church_id, first_name=first, last_name=last,
            family_id=family.id if family else None, **fields,
        ))

    async def enlist(self, gathering: GatheringType, *people: Individual) -> None:
        for person in people:
            await self._save(GatheringList(
                church_id=gathering.church_id, gathering_type_id=gathering.id,
                individual_id=person.id,
            ))

    async def session(
        self, gathering: GatheringType, session_date: date,
        attendance: dict[Individual, bool] | None = None,
    ) -> AttendanceSession:
        s = await self._save(AttendanceSession(
            church_id=gathering.church_id, gathering_type_id=gathering.id,
            session_date=session_date,
        ))
        for person, present in (attendance or {}).items():
            await self._save(AttendanceRecord(
                church_id=gathering.church_id, session_id=s.id,
                individual_id=person.id, present=present,
            ))
        return s


@pytest.fixture
def seed(test_db) -> Seeder:
    return Seeder(test_db)
