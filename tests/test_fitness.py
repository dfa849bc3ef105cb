from datetime import date, timedelta

import pytest


@pytest.fixture
def assignment(driver, make_bus, make_assignment):
    return make_assignment(make_bus("NB-7001"), driver)


def _submit(client, headers, assignment, **fields):
    body = {"assignment_id": assignment.id, "bus_id": assignment.vehicle_id}
    body.update(fields)
    return client.post("/api/bus-fitness", json=body, headers=headers)


def test_driver_submits_fitness_check(client, driver_headers, assignment):
    response = _submit(client, driver_headers, assignment, oil_level="low", notes="Topped up oil")
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Fitness check submitted successfully"
    record = body["data"]
    assert record["oil_level"] == "low"
    assert record["water_level"] == "full"
    assert record["oil_checked"] is True
    assert record["check_date"] == date.today().isoformat()
    assert record["driver_name"] == "Kamal Silva"
    assert record["bus_plate"] == "NB-7001"


def test_second_check_same_day_conflicts(client, driver_headers, assignment):
    _submit(client, driver_headers, assignment)
    response = _submit(client, driver_headers, assignment)
    assert response.status_code == 409

    yesterday = (date.today() - timedelta(days=1)).isoformat()
    assert _submit(client, driver_headers, assignment, check_date=yesterday).status_code == 201


def test_check_must_match_assignment_bus(client, driver_headers, assignment, make_bus):
    other = make_bus("NB-7002")
    response = client.post(
        "/api/bus-fitness", json={"assignment_id": assignment.id, "bus_id": other.id}, headers=driver_headers
    )
    assert response.status_code == 400


def test_unknown_level_rejected(client, driver_headers, assignment):
    response = _submit(client, driver_headers, assignment, oil_level="half")
    assert response.status_code == 400
    assert response.json()["issues"][0]["path"] == "body.oil_level"


def test_only_drivers_submit(client, accountant_headers, assignment):
    assert _submit(client, accountant_headers, assignment).status_code == 403


def test_list_records_paginates(client, admin_headers, driver_headers, assignment):
    for days_ago in range(3):
        check_date = (date.today() - timedelta(days=days_ago)).isoformat()
        _submit(client, driver_headers, assignment, check_date=check_date)

    response = client.get("/api/bus-fitness", params={"page": 1, "limit": 2}, headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert len(body["data"]) == 2
    assert body["data"][0]["check_date"] == date.today().isoformat()
    assert body["pagination"] == {"page": 1, "limit": 2, "total": 3, "totalPages": 2}

    assert client.get("/api/bus-fitness", headers=driver_headers).status_code == 403


def test_records_by_date_and_bus(client, admin_headers, driver_headers, assignment):
    _submit(client, driver_headers, assignment)
    today = date.today().isoformat()

    by_date = client.get(f"/api/bus-fitness/date/{today}", headers=admin_headers).json()
    assert len(by_date["data"]) == 1

    by_bus = client.get(f"/api/bus-fitness/bus/{assignment.vehicle_id}", headers=admin_headers).json()
    assert by_bus["busId"] == assignment.vehicle_id
    assert len(by_bus["data"]) == 1

    history = client.get(f"/api/bus-fitness/bus/{assignment.vehicle_id}/history", headers=admin_headers).json()
    assert history["data"][0]["assignment_route"] == "Colombo - Kandy"
    assert history["data"][0]["driver_employee_number"] == "EMP-DRV-001"


def test_check_status_lists_every_active_bus(client, admin_headers, driver_headers, assignment, make_bus):
    make_bus("NB-7003")
    make_bus("NB-7004", is_active=False)
    _submit(client, driver_headers, assignment, water_level="critical")

    response = client.get(f"/api/bus-fitness/status/{date.today().isoformat()}", headers=admin_headers)
    status = response.json()["data"]
    assert [s["no_plate"] for s in status] == ["NB-7001", "NB-7003"]
    assert status[0]["water_level"] == "critical"
    assert status[0]["driver_name"] == "Kamal Silva"
    assert status[1]["oil_checked"] is False
    assert status[1]["oil_level"] is None


def test_today_assignments_flag_checked(client, admin_headers, driver_headers, assignment, make_user, make_assignment,
                                        make_bus):
    other = make_assignment(make_bus("NB-7005"), make_user("driver"))
    _submit(client, driver_headers, assignment)

    response = client.get("/api/bus-fitness/today-assignments", headers=admin_headers)
    flags = {a["id"]: a["has_checked"] for a in response.json()["data"]}
    assert flags == {assignment.id: True, other.id: False}


def test_update_record_owner_only(client, admin_headers, driver_headers, headers_for, make_user, assignment):
    record = _submit(client, driver_headers, assignment).json()["data"]
    stranger = headers_for(make_user("driver"))

    response = client.put(f"/api/bus-fitness/{record['id']}", json={"oil_level": "low"}, headers=stranger)
    assert response.status_code == 403

    response = client.put(f"/api/bus-fitness/{record['id']}", json={"oil_level": "low"}, headers=driver_headers)
    assert response.status_code == 200
    assert response.json()["data"]["oil_level"] == "low"

    response = client.put(f"/api/bus-fitness/{record['id']}", json={"water_checked": False}, headers=admin_headers)
    assert response.json()["data"]["water_checked"] is False


def test_delete_record(client, admin_headers, driver_headers, assignment):
    record = _submit(client, driver_headers, assignment).json()["data"]
    assert client.delete(f"/api/bus-fitness/{record['id']}", headers=driver_headers).status_code == 403

    response = client.delete(f"/api/bus-fitness/{record['id']}", headers=admin_headers)
    assert response.json()["message"] == "Fitness record deleted successfully"
    response = client.get(f"/api/bus-fitness/{record['id']}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Fitness record not found"


def test_summary(client, accountant_headers, driver_headers, assignment):
    yesterday = (date.today() - timedelta(days=1)).isoformat()
    _submit(client, driver_headers, assignment, oil_level="low")
    _submit(client, driver_headers, assignment, check_date=yesterday, oil_checked=False, water_level="adequate")

    response = client.get("/api/bus-fitness/stats/summary", headers=accountant_headers)
    assert response.status_code == 200
    summary = response.json()["data"]
    assert summary["total_checks"] == 2
    assert summary["oil_checks_done"] == 1
    assert summary["water_checks_done"] == 2
    assert summary["oil_low_count"] == 1
    assert summary["oil_full_count"] == 1
    assert summary["water_adequate_count"] == 1
    assert summary["buses_checked"] == 1
    assert summary["drivers_active"] == 1
    assert summary["days_with_checks"] == 2

    response = client.get(
        "/api/bus-fitness/stats/summary", params={"startDate": date.today().isoformat()}, headers=accountant_headers
    )
    assert response.json()["data"]["total_checks"] == 1
