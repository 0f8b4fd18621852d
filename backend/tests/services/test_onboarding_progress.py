"""Onboarding Progress — merge semantics of the wizard position.

Invariants:
    - completed_steps is an ordered union
    - Falsy data fields never overwrite stored values
    - A database failure is swallowed and rolled back
"""

from unittest.mock import AsyncMock

from sqlalchemy.exc import OperationalError

from lmpg.services.onboarding_progress import (
    get_onboarding_progress, merge_completed_steps, save_onboarding_progress,
)


def test_merge_completed_steps_keeps_order_and_drops_repeats():
    assert merge_completed_steps([1, 3], [3, 2, 1, 4]) == [1, 3, 2, 4]
    assert merge_completed_steps(None, [2]) == [2]


async def test_first_save_creates_row(test_db, admin):
    await save_onboarding_progress(
        test_db, admin, 2, {"church_info": {"churchName": "Grace"}}, [1],
    )

    progress = await get_onboarding_progress(test_db, admin.id)
    assert progress.church_id == "church-a"
    assert progress.current_step == 2
    assert progress.church_info == {"churchName": "Grace"}
    assert progress.completed_steps == [1]


async def test_later_save_merges(test_db, admin):
    await save_onboarding_progress(
        test_db, admin, 2, {"church_info": {"churchName": "Grace"}}, [1],
    )
    await save_onboarding_progress(
        test_db, admin, 3, {"church_info": {}, "gatherings": [{"id": 1}]}, [2, 1],
    )

    admin_id = admin.id
    test_db.expire_all()
    progress = await get_onboarding_progress(test_db, admin_id)
    assert progress.current_step == 3
    assert progress.church_info == {"churchName": "Grace"}
    assert progress.gatherings == [{"id": 1}]
    assert progress.completed_steps == [1, 2]


async def test_step_can_move_backwards_without_losing_completed(test_db, admin):
    await save_onboarding_progress(test_db, admin, 3, None, [1, 2])
    await save_onboarding_progress(test_db, admin, 1)

    admin_id = admin.id
    test_db.expire_all()
    progress = await get_onboarding_progress(test_db, admin_id)
    assert progress.current_step == 1
    assert progress.completed_steps == [1, 2]


async def test_database_failure_is_logged_not_raised(test_db, admin, caplog, monkeypatch):
    monkeypatch.setattr(
        test_db, "commit",
        AsyncMock(side_effect=OperationalError("UPDATE", {}, Exception("locked"))),
    )

    await save_onboarding_progress(test_db, admin, 2)

    assert "Save onboarding progress failed" in caplog.text
