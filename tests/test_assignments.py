from datetime import datetime, timedelta, timezone


def test_create_assignment_with_camel_case_body(client, admin_headers, driver, make_bus):
    bus = make_bus()
    response = client.post(
        "/api/assignments",
        json={
            "vehicleId": bus.id,
            "employeeId": driver.id,
            "startDate": "2026-01-01",
            "endDate": "2026-01-31 18:00",
            "route": "Route 138",
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    assignment = response.json()
    assert assignment["vehicle_id"] == bus.id
    assert assignment["employee_id"] == driver.id
    assert assignment["start_date"] == "2026-01-01T00:00:00"
    assert assignment["end_date"] == "2026-01-31T18:00:00"


def test_offset_dates_are_stored_on_the_local_clock(client, admin_headers, driver, make_bus):
    bus = make_bus()
    ends_soon = datetime.now(timezone.utc) + timedelta(hours=1)
    response = client.post(
        "/api/assignments",
        json={"vehicleId": bus.id, "employeeId": driver.id, "endDate": ends_soon.isoformat()},
        headers=admin_headers,
    )
    assert response.status_code == 201
    expected = ends_soon.astimezone().replace(tzinfo=None).isoformat()
    assert response.json()["end_date"] == expected

    active = client.get("/api/assignments", params={"active": "true"}, headers=admin_headers).json()
    assert [a["id"] for a in active] == [response.json()["id"]]


def test_create_assignment_defaults_start_to_now(client, admin_headers, driver, make_bus):
    bus = make_bus()
    response = client.post(
        "/api/assignments", json={"vehicle_id": bus.id, "employee_id": driver.id}, headers=admin_headers
    )
    assert response.status_code == 201
    assert response.json()["start_date"] is not None
    assert response.json()["end_date"] is None


def test_create_assignment_unknown_bus(client, admin_headers, driver):
    response = client.post("/api/assignments", json={"vehicleId": 404, "employeeId": driver.id}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Vehicle not found"


def test_create_assignment_unknown_user(client, admin_headers, make_bus):
    bus = make_bus()
    response = client.post("/api/assignments", json={"vehicleId": bus.id, "employeeId": 404}, headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_create_assignment_requires_driver(client, admin_headers, accountant, make_bus):
    bus = make_bus()
    response = client.post(
        "/api/assignments", json={"vehicleId": bus.id, "employeeId": accountant.id}, headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "User is not a driver"


def test_create_assignment_end_before_start(client, admin_headers, driver, make_bus):
    bus = make_bus()
    response = client.post(
        "/api/assignments",
        json={"vehicleId": bus.id, "employeeId": driver.id, "startDate": "2026-02-01", "endDate": "2026-01-01"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_list_assignments_active_filter(client, driver_headers, driver, make_bus, make_assignment):
    bus = make_bus()
    current = make_assignment(bus, driver)
    finished = make_assignment(bus, driver, start=datetime(2020, 1, 1), end=datetime(2020, 2, 1))

    everything = client.get("/api/assignments", headers=driver_headers).json()
    assert [a["id"] for a in everything] == [current.id, finished.id]

    active = client.get("/api/assignments", params={"active": "true"}, headers=driver_headers).json()
    assert [a["id"] for a in active] == [current.id]

    inactive = client.get("/api/assignments", params={"active": "false"}, headers=driver_headers).json()
    assert [a["id"] for a in inactive] == [finished.id]


def test_list_assignments_by_vehicle(client, admin_headers, driver, make_bus, make_assignment):
    first, second = make_bus(), make_bus()
    make_assignment(first, driver)
    wanted = make_assignment(second, driver)
    response = client.get("/api/assignments", params={"vehicle_id": second.id}, headers=admin_headers)
    assert [a["id"] for a in response.json()] == [wanted.id]


def test_patch_assignment(client, admin_headers, driver, make_bus, make_assignment):
    assignment = make_assignment(make_bus(), driver, start=datetime(2026, 1, 1))
    response = client.patch(
        f"/api/assignments/{assignment.id}",
        json={"route": "Route 2", "endDate": "2026-06-30"},
        headers=admin_headers,
    )
    assert response.status_code == 200
    assert response.json()["route"] == "Route 2"
    assert response.json()["end_date"] == "2026-06-30T00:00:00"

    response = client.patch(
        f"/api/assignments/{assignment.id}", json={"startDate": "2026-07-01"}, headers=admin_headers
    )
    assert response.status_code == 400


def test_delete_assignment(client, admin_headers, driver, make_bus, make_assignment):
    assignment = make_assignment(make_bus(), driver)
    response = client.delete(f"/api/assignments/{assignment.id}", headers=admin_headers)
    assert response.status_code == 204
    response = client.get(f"/api/assignments/{assignment.id}", headers=admin_headers)
    assert response.status_code == 404


def test_drivers_cannot_create_assignments(client, driver_headers, driver, make_bus):
    bus = make_bus()
    response = client.post(
        "/api/assignments", json={"vehicleId": bus.id, "employeeId": driver.id}, headers=driver_headers
    )
    assert response.status_code == 403
