"""Onboarding wizard routes — church info, first gathering, first roster, progress.

Invariants:
    - Church info upserts one church_settings row and fills defaults
    - The first gathering gets four past sample sessions on its weekday
    - Roster import in the wizard never checks duplicates
    - Every step moves the caller's saved progress forward
"""

from datetime import date

from sqlalchemy import func, select

from lmpg.models import (
    AttendanceSession, ChurchSettings, Family, GatheringList, Individual,
    OnboardingProgress,
)

CHURCH_INFO = {"churchName": "  Grace Chapel ", "countryCode": "au"}

FIRST_GATHERING = {
    "name": "Sunday Morning",
    "dayOfWeek": "Sunday",
    "startTime": "10:00",
    "durationMinutes": 90,
    "frequency": "weekly",
}

PASTE = "FIRST NAME\tLAST NAME\tFAMILY NAME\nJohn\tSmith\tSMITH, John\nJane\tSmith\tSMITH, John\n"


async def _progress(test_db, user) -> OnboardingProgress:
    result = await test_db.execute(
        select(OnboardingProgress)
        .where(OnboardingProgress.user_id == user.id)
        .execution_options(populate_existing=True),
    )
    return result.scalar_one()


async def _count(test_db, model, *where) -> int:
    result = await test_db.execute(select(func.count()).select_from(model).where(*where))
    return result.scalar_one()


async def _wizard_gathering(client, church, auth) -> int:
    res = await client.post(
        "/api/onboarding/gathering", json=FIRST_GATHERING, headers=auth(church.admin),
    )
    assert res.status_code == 200
    return res.json()["gatheringId"]


# ─── Status / countries ──────────────────────────────────────────

async def test_status_before_anything_saved(client, church, auth):
    res = await client.get("/api/onboarding/status", headers=auth(church.admin))
    assert res.status_code == 200
    assert res.json() == {"completed": False, "settings": None, "progress": None}


async def test_status_is_admin_only(client, church, auth):
    res = await client.get("/api/onboarding/status", headers=auth(church.coordinator))
    assert res.status_code == 403


async def test_countries_list(client, church, auth):
    res = await client.get("/api/onboarding/countries", headers=auth(church.admin))
    codes = {c["code"] for c in res.json()["countries"]}
    assert {"AU", "US", "GB"} <= codes
    au = next(c for c in res.json()["countries"] if c["code"] == "AU")
    assert au["callingCode"] == "+61"


# ─── Church info ─────────────────────────────────────────────────

async def test_church_info_saved_with_defaults(client, church, auth, test_db):
    res = await client.post(
        "/api/onboarding/church-info", json=CHURCH_INFO, headers=auth(church.admin),
    )

    assert res.status_code == 200
    row = (await test_db.execute(select(ChurchSettings))).scalar_one()
    assert row.church_id == "church-a"
    assert row.church_name == "Grace Chapel"
    assert row.country_code == "AU"
    assert row.timezone == "America/New_York"
    assert row.email_from_name == "Let My People Grow"
    assert row.onboarding_completed is False


async def test_church_info_upserts(client, church, auth, test_db):
    headers = auth(church.admin)
    await client.post("/api/onboarding/church-info", json=CHURCH_INFO, headers=headers)
    await client.post(
        "/api/onboarding/church-info",
        json={**CHURCH_INFO, "churchName": "Grace Church", "timezone": "Australia/Sydney"},
        headers=headers,
    )

    rows = (await test_db.execute(
        select(ChurchSettings).execution_options(populate_existing=True),
    )).scalars().all()
    assert len(rows) == 1
    assert rows[0].church_name == "Grace Church"
    assert rows[0].timezone == "Australia/Sydney"


async def test_church_info_records_progress(client, church, auth, test_db):
    await client.post("/api/onboarding/church-info", json=CHURCH_INFO, headers=auth(church.admin))

    progress = await _progress(test_db, church.admin)
    assert progress.current_step == 2
    assert progress.completed_steps == [1]
    assert progress.church_info["churchName"] == "Grace Chapel"


async def test_unsupported_country_rejected(client, church, auth):
    res = await client.post(
        "/api/onboarding/church-info",
        json={**CHURCH_INFO, "countryCode": "XX"}, headers=auth(church.admin),
    )
    assert res.status_code == 400
    assert "Country not supported" in res.text


async def test_invalid_email_rejected(client, church, auth):
    res = await client.post(
        "/api/onboarding/church-info",
        json={**CHURCH_INFO, "emailFromAddress": "not-an-email"},
        headers=auth(church.admin),
    )
    assert res.status_code == 400


# ─── First gathering ─────────────────────────────────────────────

async def test_first_gathering_gets_four_sample_sessions(client, church, auth, test_db):
    gathering_id = await _wizard_gathering(client, church, auth)

    result = await test_db.execute(
        select(AttendanceSession.session_date).where(
            AttendanceSession.gathering_type_id == gathering_id,
        ).order_by(AttendanceSession.session_date.desc()),
    )
    dates = result.scalars().all()
    assert len(dates) == 4
    assert all(d.weekday() == 6 for d in dates)
    assert all(d < date.today() for d in dates)
    assert [(dates[i] - dates[i + 1]).days for i in range(3)] == [7, 7, 7]


async def test_first_gathering_snapshot_saved_in_progress(client, church, auth, test_db):
    gathering_id = await _wizard_gathering(client, church, auth)

    progress = await _progress(test_db, church.admin)
    assert progress.current_step == 2
    assert [g["id"] for g in progress.gatherings] == [gathering_id]
    assert progress.gatherings[0]["dayOfWeek"] == "Sunday"


async def test_first_gathering_duration_bounds(client, church, auth):
    res = await client.post(
        "/api/onboarding/gathering",
        json={**FIRST_GATHERING, "durationMinutes": 10}, headers=auth(church.admin),
    )
    assert res.status_code == 400


async def test_delete_wizard_gathering(client, church, auth, test_db):
    gathering_id = await _wizard_gathering(client, church, auth)

    res = await client.delete(
        f"/api/onboarding/gathering/{gathering_id}", headers=auth(church.admin),
    )

    assert res.status_code == 200
    assert await _count(
        test_db, AttendanceSession, AttendanceSession.gathering_type_id == gathering_id,
    ) == 0


async def test_delete_someone_elses_gathering_not_found(client, church, auth, seed):
    g = await seed.gathering(church.other_admin)
    res = await client.delete(
        f"/api/onboarding/gathering/{g.id}", headers=auth(church.admin),
    )
    assert res.status_code == 404


# ─── First roster ────────────────────────────────────────────────

async def test_paste_import_creates_people_and_one_family(client, church, auth, test_db):
    gathering_id = await _wizard_gathering(client, church, auth)

    res = await client.post(
        f"/api/onboarding/import-paste/{gathering_id}",
        json={"data": PASTE}, headers=auth(church.admin),
    )

    assert res.status_code == 200
    assert res.json() == {
        "message": "Successfully imported 2 individuals",
        "imported": 2,
        "families": 1,
        "gatheringId": gathering_id,
    }
    assert await _count(test_db, Family) == 1
    assert await _count(
        test_db, GatheringList, GatheringList.gathering_type_id == gathering_id,
    ) == 2


async def test_wizard_import_does_not_skip_existing_names(client, church, auth, seed, test_db):
    await seed.individual("church-a", "John", "Smith")
    gathering_id = await _wizard_gathering(client, church, auth)

    res = await client.post(
        f"/api/onboarding/import-paste/{gathering_id}",
        json={"data": PASTE}, headers=auth(church.admin),
    )

    assert res.json()["imported"] == 2
    assert await _count(test_db, Individual, Individual.first_name == "John") == 2


async def test_paste_without_name_columns_rejected(client, church, auth):
    gathering_id = await _wizard_gathering(client, church, auth)
    res = await client.post(
        f"/api/onboarding/import-paste/{gathering_id}",
        json={"data": "NAME\tAGE\nJohn\t40"}, headers=auth(church.admin),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Data must contain FIRST NAME and LAST NAME columns"


async def test_csv_upload_import(client, church, auth, test_db):
    gathering_id = await _wizard_gathering(client, church, auth)
    csv_bytes = (
        b"\xef\xbb\xbfFIRST NAME,LAST NAME,FAMILY NAME\n"
        b"Ann,Lee,\"LEE, Ann\"\n"
        b",NoFirst,\n"
    )

    res = await client.post(
        f"/api/onboarding/upload-csv/{gathering_id}",
        files={"csvFile": ("roster.csv", csv_bytes, "text/csv")},
        headers=auth(church.admin),
    )

    assert res.status_code == 200
    assert res.json()["imported"] == 1
    progress = await _progress(test_db, church.admin)
    assert progress.current_step == 3
    assert progress.completed_steps == [2]
    assert progress.csv_upload["imported"] == 1


async def test_csv_upload_rejects_other_file_types(client, church, auth):
    gathering_id = await _wizard_gathering(client, church, auth)
    res = await client.post(
        f"/api/onboarding/upload-csv/{gathering_id}",
        files={"csvFile": ("roster.xlsx", b"binary", "application/octet-stream")},
        headers=auth(church.admin),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "Only CSV files are allowed"
    assert res.json()["details"][0]["field"] == "csvFile"


async def test_csv_upload_requires_file(client, church, auth):
    gathering_id = await _wizard_gathering(client, church, auth)
    res = await client.post(
        f"/api/onboarding/upload-csv/{gathering_id}", headers=auth(church.admin),
    )
    assert res.status_code == 400
    assert res.json()["error"] == "CSV file is required"


# ─── Complete / progress / template ──────────────────────────────

async def test_complete_marks_settings_and_progress(client, church, auth, test_db):
    headers = auth(church.admin)
    await client.post("/api/onboarding/church-info", json=CHURCH_INFO, headers=headers)

    res = await client.post("/api/onboarding/complete", headers=headers)

    assert res.status_code == 200
    status = (await client.get("/api/onboarding/status", headers=headers)).json()
    assert status["completed"] is True
    assert status["settings"]["churchName"] == "Grace Chapel"
    assert status["progress"]["currentStep"] == 4
    assert status["progress"]["completedSteps"] == [1, 3, 4]


async def test_save_progress_keeps_unsupplied_fields(client, church, auth, test_db):
    headers = auth(church.admin)
    await client.post("/api/onboarding/church-info", json=CHURCH_INFO, headers=headers)

    res = await client.post(
        "/api/onboarding/save-progress",
        json={"currentStep": 3, "data": {"csvUpload": {"imported": 5}}},
        headers=headers,
    )

    assert res.status_code == 200
    progress = await _progress(test_db, church.admin)
    assert progress.current_step == 3
    assert progress.csv_upload == {"imported": 5}
    assert progress.church_info["churchName"] == "Grace Chapel"
    assert progress.completed_steps == [1]


async def test_save_progress_step_out_of_range(client, church, auth):
    res = await client.post(
        "/api/onboarding/save-progress", json={"currentStep": 5},
        headers=auth(church.admin),
    )
    assert res.status_code == 400


async def test_csv_template_is_public(client):
    res = await client.get("/api/onboarding/csv-template")
    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/csv")
    assert "attendance_import_template.csv" in res.headers["content-disposition"]
    assert res.text.splitlines()[0] == '"FIRST NAME","LAST NAME","FAMILY NAME"'
