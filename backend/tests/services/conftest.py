"""Service test fixtures — a church admin and a gathering in the test database."""

import pytest

from lmpg.models import GatheringType, User


@pytest.fixture
async def admin(test_db) -> User:
    user = User(church_id="church-a", email="admin@a.test", role="admin")
    test_db.add(user)
    await test_db.commit()
    return user


@pytest.fixture
async def gathering(test_db, admin) -> GatheringType:
    g = GatheringType(
        church_id=admin.church_id, name="Sunday Service", day_of_week="Sunday",
        start_time="10:00", frequency="weekly", attendance_type="standard",
        created_by=admin.id,
    )
    test_db.add(g)
    await test_db.commit()
    return g
