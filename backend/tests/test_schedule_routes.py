from datetime import date

from conftest import make_schedule

SCHEDULES = "/api/schedules"


def schedule_payload(**overrides):
    payload = {
        "ownerId": "emp-1",
        "startDate": "2025-03-10",
        "endDate": "2025-03-31",
        "startTime": "09:00",
        "endTime": "17:00",
        "days": ["monday", "tuesday", "wednesday", "thursday", "friday"],
    }
    payload.update(overrides)
    return payload


def test_manager_creates_schedule(client, login, schedule_store):
    login("mgr-1")
    response = client.post(f"{SCHEDULES}/", json=schedule_payload())

    assert response.status_code == 201
    body = response.json()
    assert body["_id"] in schedule_store.items
    assert body["ownerId"] == "emp-1"
    assert body["department"] == "dept-1"
    assert body["createdBy"] == "mgr-1"
    assert body["isActive"] is True


def test_employee_cannot_create_schedule(client, login):
    login("emp-1")
    response = client.post(f"{SCHEDULES}/", json=schedule_payload())
    assert response.status_code == 403


def test_employee_self_scheduling_when_enabled(client, login, monkeypatch):
    monkeypatch.setenv("ALLOW_SELF_SCHEDULING", "1")
    login("emp-1")

    assert client.post(f"{SCHEDULES}/", json=schedule_payload()).status_code == 201
    assert client.post(f"{SCHEDULES}/", json=schedule_payload(ownerId="emp-2")).status_code == 403


def test_create_for_unknown_employee(client, login):
    login("mgr-1")
    response = client.post(f"{SCHEDULES}/", json=schedule_payload(ownerId="ghost"))
    assert response.status_code == 404
    assert response.json()["detail"] == "Employee not found"


def test_conflicting_schedule_is_rejected_with_suggestions(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1", start_time="14:00", end_time="22:00")
    login("mgr-1")

    response = client.post(f"{SCHEDULES}/", json=schedule_payload(startTime="16:00", endTime="20:00"))

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert detail["message"] == "Schedule validation failed"
    assert detail["errors"][0]["kind"] == "conflict"
    assert detail["errors"][0]["field"] == "time"
    assert detail["errors"][0]["conflicts"][0]["scheduleId"] == "s1"
    assert detail["errors"][0]["conflicts"][0]["timeRange"] == "14:00-22:00"
    assert [s["type"] for s in detail["suggestions"]] == ["alternative_days"]
    assert list(schedule_store.items) == ["s1"]


def test_field_errors_are_reported_together(client, login):
    login("mgr-1")
    response = client.post(
        f"{SCHEDULES}/",
        json=schedule_payload(startDate="2025-03-20", endDate="2025-03-10", days=[]),
    )

    assert response.status_code == 422
    detail = response.json()["detail"]
    assert [(e["kind"], e["field"]) for e in detail["errors"]] == [
        ("field", "endDate"),
        ("field", "days"),
    ]
    assert detail["suggestions"] == []


def test_malformed_time_is_rejected_by_request_validation(client, login):
    login("mgr-1")
    response = client.post(f"{SCHEDULES}/", json=schedule_payload(startTime="25:00"))
    assert response.status_code == 422


def test_validate_reports_hours_and_warnings(client, login):
    login("emp-1")
    response = client.post(
        f"{SCHEDULES}/validate",
        json=schedule_payload(startTime="09:00", endTime="18:00", endDate="2025-03-14"),
    )

    assert response.status_code == 200
    report = response.json()
    assert report["valid"] is True
    assert report["errors"] == []
    assert report["weeklyHours"] == 45
    assert report["totalHours"] == 45
    assert len(report["warnings"]) == 1


def test_validate_respects_configured_limit(client, login, monkeypatch):
    monkeypatch.setenv("MAX_WEEKLY_HOURS", "50")
    login("emp-1")
    report = client.post(
        f"{SCHEDULES}/validate", json=schedule_payload(startTime="09:00", endTime="18:00")
    ).json()
    assert report["warnings"] == []


def test_validate_excludes_the_schedule_being_edited(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1")
    login("mgr-1")

    edit = client.post(f"{SCHEDULES}/validate", json=schedule_payload(id="s1", startTime="10:00")).json()
    fresh = client.post(f"{SCHEDULES}/validate", json=schedule_payload(startTime="10:00")).json()

    assert edit["valid"] is True
    assert fresh["valid"] is False
    assert fresh["suggestions"]


def test_owner_and_managers_can_read_schedule(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1", owner_id="emp-1")

    login("emp-1")
    assert client.get(f"{SCHEDULES}/s1").json()["_id"] == "s1"

    login("mgr-1")
    assert client.get(f"{SCHEDULES}/s1").status_code == 200

    login("emp-2")
    assert client.get(f"{SCHEDULES}/s1").status_code == 403
    assert client.get(f"{SCHEDULES}/user/emp-1").status_code == 403


def test_missing_schedule(client, login):
    login("mgr-1")
    assert client.get(f"{SCHEDULES}/nope").status_code == 404


def test_my_schedule_lists_only_own(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1", owner_id="emp-1")
    schedule_store.items["s2"] = make_schedule("s2", owner_id="emp-2")
    login("emp-1")

    response = client.get(f"{SCHEDULES}/my-schedule")

    assert [s["_id"] for s in response.json()] == ["s1"]


def test_list_filters_by_date_window_and_department(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1", department="dept-1")
    schedule_store.items["s2"] = make_schedule(
        "s2",
        owner_id="emp-3",
        department="dept-2",
        start_date=date(2025, 5, 5),
        end_date=date(2025, 5, 30),
    )

    login("emp-1")
    assert client.get(f"{SCHEDULES}/").status_code == 403

    login("admin-1")
    march = client.get(f"{SCHEDULES}/", params={"startDate": "2025-03-01", "endDate": "2025-03-31"})
    assert [s["_id"] for s in march.json()] == ["s1"]

    dept_2 = client.get(f"{SCHEDULES}/", params={"department": "dept-2"})
    assert [s["_id"] for s in dept_2.json()] == ["s2"]


def test_update_revalidates_against_other_schedules(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1", start_time="09:00", end_time="12:00")
    schedule_store.items["s2"] = make_schedule("s2", start_time="13:00", end_time="17:00")
    login("mgr-1")

    moved = client.put(f"{SCHEDULES}/s2", json={"startTime": "12:00", "notes": "Shifted"})
    assert moved.status_code == 200
    assert moved.json()["startTime"] == "12:00"
    assert moved.json()["notes"] == "Shifted"

    clash = client.put(f"{SCHEDULES}/s2", json={"startTime": "11:00"})
    assert clash.status_code == 422
    assert clash.json()["detail"]["errors"][0]["conflicts"][0]["scheduleId"] == "s1"
    assert schedule_store.items["s2"].startTime == "12:00"


def test_update_ignores_explicit_nulls(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1")
    login("mgr-1")

    response = client.put(f"{SCHEDULES}/s1", json={"startTime": None, "notes": "Keep times"})

    assert response.status_code == 200
    assert response.json()["startTime"] == "09:00"


def test_delete_schedule(client, login, schedule_store):
    schedule_store.items["s1"] = make_schedule("s1")

    login("emp-1")
    assert client.delete(f"{SCHEDULES}/s1").status_code == 403

    login("mgr-1")
    assert client.delete(f"{SCHEDULES}/s1").status_code == 204
    assert client.delete(f"{SCHEDULES}/s1").status_code == 404


def test_repeated_days_are_collapsed_on_create_and_update(client, login, schedule_store):
    login("mgr-1")
    created = client.post(f"{SCHEDULES}/", json=schedule_payload(days=["monday", "monday", "friday"]))
    assert created.json()["days"] == ["monday", "friday"]

    schedule_id = created.json()["_id"]
    updated = client.put(f"{SCHEDULES}/{schedule_id}", json={"days": ["tuesday", "tuesday"]})
    assert updated.json()["days"] == ["tuesday"]
    assert [d.value for d in schedule_store.items[schedule_id].days] == ["tuesday"]
