"""Tests for the observation lifecycle."""
import uuid
from datetime import date, datetime
from zoneinfo import ZoneInfo

import pytest
from httpx import AsyncClient

from classroom_observations.core.deps import get_report_assembler
from classroom_observations.db.models import ObservationEntry, Student
from classroom_observations.services import observation_service
from classroom_observations.services.report_service import ReportText


async def _add_entry(client: AsyncClient, observation_id: str, **fields) -> dict:
    body = {"behavior": "On task during lesson", "context": "Whole group math"}
    body.update(fields)
    response = await client.post(f"/observations/{observation_id}/entries", json=body)
    assert response.status_code == 201, response.text
    return response.json()


async def _stop(client: AsyncClient, observation_id: str, end_time: str = "09:45") -> dict:
    response = await client.post(
        f"/observations/{observation_id}/stop", json={"end_time": end_time}
    )
    assert response.status_code == 200, response.text
    return response.json()


# =============================================================================
# Create
# =============================================================================

@pytest.mark.asyncio
async def test_create_observation_is_draft_owned_by_caller(
    authed_client: AsyncClient, observation_payload: dict, observer
):
    response = await authed_client.post("/observations", json=observation_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "draft"
    assert data["observer_id"] == str(observer.user.id)
    assert data["entries"] == []
    assert data["student"]["first_name"] == "John"
    assert data["student"]["school"]["name"] == "Lincoln Elementary"
    assert data["student"]["primary_idea_category"]["code"] == "AU"
    assert data["classroom"]["name"] == "Room 12"
    assert data["teacher"]["last_name"] == "Baker"
    assert data["observer"]["email"] == "jturner@example.com"


@pytest.mark.asyncio
async def test_create_ignores_client_status(authed_client: AsyncClient, observation_payload: dict):
    response = await authed_client.post(
        "/observations", json={**observation_payload, "status": "reviewed"}
    )
    assert response.status_code == 201
    assert response.json()["status"] == "draft"


@pytest.mark.asyncio
async def test_create_missing_fields_is_400(authed_client: AsyncClient, observation_payload: dict):
    body = {k: v for k, v in observation_payload.items() if k not in ("purpose", "setting")}
    response = await authed_client.post("/observations", json=body)
    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail.startswith("Missing required fields")
    assert "purpose" in detail
    assert "setting" in detail


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field,value",
    [
        ("total_students", "lots"),
        ("total_students", 0),
        ("total_teachers", -1),
        ("date", "not-a-date"),
        ("student_id", "not-a-uuid"),
    ],
)
async def test_create_malformed_fields_is_400(
    authed_client: AsyncClient, observation_payload: dict, field, value
):
    response = await authed_client.post(
        "/observations", json={**observation_payload, field: value}
    )
    assert response.status_code == 400
    assert field in response.json()["detail"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field,detail",
    [
        ("student_id", "Student not found"),
        ("classroom_id", "Classroom not found"),
        ("teacher_id", "Teacher not found"),
    ],
)
async def test_create_with_unknown_reference_is_404(
    authed_client: AsyncClient, observation_payload: dict, field, detail
):
    response = await authed_client.post(
        "/observations", json={**observation_payload, field: str(uuid.uuid4())}
    )
    assert response.status_code == 404
    assert response.json()["detail"] == detail


@pytest.mark.asyncio
async def test_create_for_inactive_student_is_400(
    authed_client: AsyncClient, observation_payload: dict, student
):
    await authed_client.delete(f"/students/{student.id}")
    response = await authed_client.post("/observations", json=observation_payload)
    assert response.status_code == 400


# =============================================================================
# Read & list
# =============================================================================

@pytest.mark.asyncio
async def test_get_observation(authed_client: AsyncClient, observation: dict):
    response = await authed_client.get(f"/observations/{observation['id']}")
    assert response.status_code == 200
    assert response.json()["id"] == observation["id"]


@pytest.mark.asyncio
async def test_get_foreign_observation_is_403(other_client: AsyncClient, observation: dict):
    response = await other_client.get(f"/observations/{observation['id']}")
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_get_unknown_observation_is_404(authed_client: AsyncClient):
    response = await authed_client.get(f"/observations/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json()["detail"] == "Observation not found"


@pytest.mark.asyncio
async def test_get_malformed_id_is_400(authed_client: AsyncClient):
    response = await authed_client.get("/observations/not-a-uuid")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_list_only_returns_own_observations(
    authed_client: AsyncClient,
    other_client: AsyncClient,
    observation_payload: dict,
    observation: dict,
):
    await other_client.post("/observations", json=observation_payload)

    mine = (await authed_client.get("/observations")).json()
    theirs = (await other_client.get("/observations")).json()
    assert [o["id"] for o in mine] == [observation["id"]]
    assert len(theirs) == 1
    assert theirs[0]["id"] != observation["id"]


@pytest.mark.asyncio
async def test_list_sorted_by_date_desc(authed_client: AsyncClient, observation_payload: dict):
    for day in ("2024-03-01", "2024-03-20", "2024-03-10"):
        await authed_client.post("/observations", json={**observation_payload, "date": day})

    data = (await authed_client.get("/observations")).json()
    assert [o["date"] for o in data] == ["2024-03-20", "2024-03-10", "2024-03-01"]


@pytest.mark.asyncio
async def test_list_nests_entries_sorted_by_time(authed_client: AsyncClient, observation: dict):
    await _add_entry(authed_client, observation["id"], time_of_day="10:15", timestamp="1015")
    await _add_entry(authed_client, observation["id"], time_of_day="9:05", timestamp="9:05")

    data = (await authed_client.get("/observations")).json()
    assert [e["time_of_day"] for e in data[0]["entries"]] == ["09:05", "10:15"]


@pytest.mark.asyncio
async def test_list_filters(
    authed_client: AsyncClient, observation_payload: dict, observation: dict, db, school
):
    other_student = Student(
        first_name="Emma",
        last_name="Johnson",
        date_of_birth=date(2014, 8, 22),
        grade="5th Grade",
        school_id=school.id,
    )
    db.add(other_student)
    db.commit()
    second = (
        await authed_client.post(
            "/observations", json={**observation_payload, "student_id": str(other_student.id)}
        )
    ).json()
    await _stop(authed_client, second["id"])

    by_student = (
        await authed_client.get("/observations", params={"student_id": observation["student_id"]})
    ).json()
    assert [o["id"] for o in by_student] == [observation["id"]]

    completed = (await authed_client.get("/observations", params={"status": "completed"})).json()
    assert [o["id"] for o in completed] == [second["id"]]

    by_name = (await authed_client.get("/observations", params={"q": "emma"})).json()
    assert [o["id"] for o in by_name] == [second["id"]]

    by_teacher = (await authed_client.get("/observations", params={"q": "BAKER"})).json()
    assert len(by_teacher) == 2


@pytest.mark.asyncio
async def test_list_unknown_status_is_400(authed_client: AsyncClient):
    response = await authed_client.get("/observations", params={"status": "archived"})
    assert response.status_code == 400


# =============================================================================
# Update
# =============================================================================

@pytest.mark.asyncio
async def test_update_applies_only_present_fields(authed_client: AsyncClient, observation: dict):
    response = await authed_client.put(
        f"/observations/{observation['id']}",
        json={"purpose": "Follow-up observation", "setting": None},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["purpose"] == "Follow-up observation"
    assert data["setting"] == "General Education"
    assert data["start_time"] == "09:00"


@pytest.mark.asyncio
async def test_update_can_clear_notes(authed_client: AsyncClient, observation: dict):
    url = f"/observations/{observation['id']}"
    await authed_client.put(url, json={"notes": "Seated near the door"})
    response = await authed_client.put(url, json={"notes": None})
    assert response.json()["notes"] is None


@pytest.mark.asyncio
async def test_update_status_moves_forward_only(authed_client: AsyncClient, observation: dict):
    url = f"/observations/{observation['id']}"
    response = await authed_client.put(url, json={"status": "completed"})
    assert response.status_code == 200
    assert response.json()["status"] == "completed"

    response = await authed_client.put(url, json={"status": "draft"})
    assert response.status_code == 400

    response = await authed_client.put(url, json={"status": "reviewed"})
    assert response.json()["status"] == "reviewed"

    response = await authed_client.put(url, json={"status": "completed"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_cannot_skip_to_reviewed(authed_client: AsyncClient, observation: dict):
    response = await authed_client.put(
        f"/observations/{observation['id']}", json={"status": "reviewed"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_update_malformed_field_is_400(authed_client: AsyncClient, observation: dict):
    response = await authed_client.put(
        f"/observations/{observation['id']}", json={"total_students": "many"}
    )
    assert response.status_code == 400
    assert "total_students" in response.json()["detail"]


@pytest.mark.asyncio
async def test_foreign_update_is_403_regardless_of_body(
    other_client: AsyncClient, observation: dict
):
    response = await other_client.put(
        f"/observations/{observation['id']}", json={"total_students": "many"}
    )
    assert response.status_code == 403

    response = await other_client.put(f"/observations/{observation['id']}", json=[1])
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_update_unknown_observation_is_404_before_body_check(authed_client: AsyncClient):
    response = await authed_client.put(f"/observations/{uuid.uuid4()}", json=[1])
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_update_non_object_body_is_400(authed_client: AsyncClient, observation: dict):
    response = await authed_client.put(f"/observations/{observation['id']}", json=[1])
    assert response.status_code == 400
    assert response.json()["detail"] == "Request body must be a JSON object"


# =============================================================================
# Stop
# =============================================================================

@pytest.mark.asyncio
async def test_stop_completes_with_end_time(authed_client: AsyncClient, observation: dict):
    data = await _stop(authed_client, observation["id"], "09:45")
    assert data["status"] == "completed"
    assert data["end_time"] == "09:45"


@pytest.mark.asyncio
async def test_restop_overwrites_end_time(authed_client: AsyncClient, observation: dict):
    await _stop(authed_client, observation["id"], "09:45")
    data = await _stop(authed_client, observation["id"], "10:05")
    assert data["status"] == "completed"
    assert data["end_time"] == "10:05"


@pytest.mark.asyncio
async def test_stop_defaults_to_server_clock(
    authed_client: AsyncClient, observation: dict, monkeypatch
):
    fixed = datetime(2024, 3, 15, 9, 7, tzinfo=ZoneInfo("America/Los_Angeles"))
    monkeypatch.setattr(observation_service, "now_local", lambda: fixed)

    response = await authed_client.post(f"/observations/{observation['id']}/stop")
    assert response.status_code == 200
    assert response.json()["end_time"] == "09:07"


@pytest.mark.asyncio
async def test_stop_reviewed_is_400(authed_client: AsyncClient, observation: dict):
    await _stop(authed_client, observation["id"])
    await authed_client.post(f"/observations/{observation['id']}/report", json={})

    response = await authed_client.post(
        f"/observations/{observation['id']}/stop", json={"end_time": "11:00"}
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_foreign_stop_is_403(other_client: AsyncClient, observation: dict):
    response = await other_client.post(f"/observations/{observation['id']}/stop", json={})
    assert response.status_code == 403


# =============================================================================
# Report
# =============================================================================

@pytest.mark.asyncio
async def test_report_draft_is_generated_and_not_saved(
    authed_client: AsyncClient, observation: dict
):
    await _add_entry(authed_client, observation["id"])
    response = await authed_client.get(f"/observations/{observation['id']}/report")
    assert response.status_code == 200
    data = response.json()
    assert data["source"] == "generated"
    assert "John" in data["summary"]
    assert data["recommendations"]

    current = (await authed_client.get(f"/observations/{observation['id']}")).json()
    assert current["notes"] is None
    assert current["status"] == "draft"


@pytest.mark.asyncio
async def test_save_report_marks_reviewed_with_fixed_layout(
    authed_client: AsyncClient, observation: dict
):
    await _stop(authed_client, observation["id"])
    response = await authed_client.post(
        f"/observations/{observation['id']}/report",
        json={"summary": "Calm and focused.", "recommendations": "Keep seating."},
    )
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "reviewed"
    assert data["notes"] == "SUMMARY: Calm and focused.\n\nRECOMMENDATIONS: Keep seating."

    saved = (await authed_client.get(f"/observations/{observation['id']}/report")).json()
    assert saved["source"] == "saved"
    assert saved["summary"] == "Calm and focused."
    assert saved["recommendations"] == "Keep seating."


@pytest.mark.asyncio
async def test_save_report_falls_back_to_generated_text(
    authed_client: AsyncClient, observation: dict
):
    await _add_entry(authed_client, observation["id"])
    await _stop(authed_client, observation["id"])
    draft = (await authed_client.get(f"/observations/{observation['id']}/report")).json()

    response = await authed_client.post(
        f"/observations/{observation['id']}/report", json={"summary": "Edited summary."}
    )
    assert response.json()["notes"] == (
        f"SUMMARY: Edited summary.\n\nRECOMMENDATIONS: {draft['recommendations']}"
    )


@pytest.mark.asyncio
async def test_resave_reviewed_report(authed_client: AsyncClient, observation: dict):
    await _stop(authed_client, observation["id"])
    url = f"/observations/{observation['id']}/report"
    await authed_client.post(url, json={"summary": "First.", "recommendations": "One."})
    response = await authed_client.post(url, json={"summary": "Second.", "recommendations": "Two."})
    assert response.status_code == 200
    assert response.json()["notes"] == "SUMMARY: Second.\n\nRECOMMENDATIONS: Two."


@pytest.mark.asyncio
async def test_saved_recommendations_may_repeat_section_heading(
    authed_client: AsyncClient, observation: dict
):
    await _stop(authed_client, observation["id"])
    recommendations = "Seat near the teacher.\n\nRECOMMENDATIONS: follow up in May."
    url = f"/observations/{observation['id']}/report"
    await authed_client.post(url, json={"summary": "Calm.", "recommendations": recommendations})

    saved = (await authed_client.get(url)).json()
    assert saved["summary"] == "Calm."
    assert saved["recommendations"] == recommendations


@pytest.mark.asyncio
async def test_summary_with_section_heading_is_400(authed_client: AsyncClient, observation: dict):
    await _stop(authed_client, observation["id"])
    response = await authed_client.post(
        f"/observations/{observation['id']}/report",
        json={"summary": "Calm.\n\nRECOMMENDATIONS: none", "recommendations": "Keep seating."},
    )
    assert response.status_code == 400
    assert "RECOMMENDATIONS" in response.json()["detail"]


@pytest.mark.asyncio
async def test_save_report_on_draft_is_400(authed_client: AsyncClient, observation: dict):
    response = await authed_client.post(f"/observations/{observation['id']}/report", json={})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_report_assembler_can_be_replaced(app, authed_client: AsyncClient, observation: dict):
    def fixed_assembler(first_name, entries):
        return ReportText(summary=f"{first_name}: {len(entries)}", recommendations="None.")

    app.dependency_overrides[get_report_assembler] = lambda: fixed_assembler
    await _add_entry(authed_client, observation["id"])

    data = (await authed_client.get(f"/observations/{observation['id']}/report")).json()
    assert data["summary"] == "John: 1"
    assert data["recommendations"] == "None."


@pytest.mark.asyncio
async def test_foreign_report_is_403(other_client: AsyncClient, observation: dict):
    assert (await other_client.get(f"/observations/{observation['id']}/report")).status_code == 403
    response = await other_client.post(
        f"/observations/{observation['id']}/report", json={"summary": ""}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_report_pdf_requires_stopped_observation(
    authed_client: AsyncClient, observation: dict
):
    response = await authed_client.get(f"/observations/{observation['id']}/report.pdf")
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_report_pdf(authed_client: AsyncClient, observation: dict):
    await _add_entry(authed_client, observation["id"], behavior="Refused <worksheet> & left seat")
    await _stop(authed_client, observation["id"])

    response = await authed_client.get(f"/observations/{observation['id']}/report.pdf")
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "attachment" in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


# =============================================================================
# Delete
# =============================================================================

@pytest.mark.asyncio
async def test_delete_cascades_entries(authed_client: AsyncClient, observation: dict, db):
    await _add_entry(authed_client, observation["id"])
    await _add_entry(authed_client, observation["id"])

    response = await authed_client.delete(f"/observations/{observation['id']}")
    assert response.status_code == 200
    assert "message" in response.json()

    assert (await authed_client.get(f"/observations/{observation['id']}")).status_code == 404
    remaining = (
        db.query(ObservationEntry)
        .filter(ObservationEntry.observation_id == uuid.UUID(observation["id"]))
        .count()
    )
    assert remaining == 0


@pytest.mark.asyncio
async def test_foreign_delete_is_403(
    authed_client: AsyncClient, other_client: AsyncClient, observation: dict
):
    response = await other_client.delete(f"/observations/{observation['id']}")
    assert response.status_code == 403
    assert (await authed_client.get(f"/observations/{observation['id']}")).status_code == 200


# =============================================================================
# End to end
# =============================================================================

@pytest.mark.asyncio
async def test_full_observation_session(
    authed_client: AsyncClient, other_client: AsyncClient, observation_payload: dict
):
    created = await authed_client.post("/observations", json=observation_payload)
    assert created.status_code == 201
    observation_id = created.json()["id"]

    await _add_entry(
        authed_client, observation_id, time_of_day="09:10", timestamp="9:10",
        behavior="Engaged in partner work", context="Transition to groups",
    )
    await _add_entry(
        authed_client, observation_id, time_of_day="09:05", timestamp="9:05",
        behavior="On task", context="Teacher giving directions",
    )
    await _add_entry(
        authed_client, observation_id, time_of_day="09:20", timestamp="9:20",
        behavior="Off task, needed redirect", context="Independent work",
    )

    entries = (await authed_client.get(f"/observations/{observation_id}/entries")).json()
    assert [e["time_of_day"] for e in entries] == ["09:05", "09:10", "09:20"]

    assert (await other_client.get(f"/observations/{observation_id}/entries")).status_code == 403

    stopped = await _stop(authed_client, observation_id, "09:45")
    assert stopped["status"] == "completed"

    blocked = await authed_client.post(
        f"/observations/{observation_id}/entries",
        json={"behavior": "Late entry", "context": "After stop"},
    )
    assert blocked.status_code == 400

    draft = (await authed_client.get(f"/observations/{observation_id}/report")).json()
    saved = await authed_client.post(
        f"/observations/{observation_id}/report",
        json={"summary": draft["summary"], "recommendations": draft["recommendations"]},
    )
    assert saved.status_code == 200
    final = saved.json()
    assert final["status"] == "reviewed"
    assert final["end_time"] == "09:45"
    assert final["notes"].startswith("SUMMARY: ")
    assert "\n\nRECOMMENDATIONS: " in final["notes"]
    assert len(final["entries"]) == 3
