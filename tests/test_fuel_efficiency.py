import pytest

URL = "/api/fuel-efficiency"


@pytest.fixture
def fleet(driver, make_user, make_bus, make_assignment, add_reading, add_fuel):
    """Two buses on the road this week and one idle bus.

    NE-1001 runs 400 km on 100 L, NE-1002 runs 200 km on 100 L.
    """
    second_driver = make_user("driver", name="Ruwan Jayasinghe", employe_number="EMP-DRV-002")
    good_bus = make_bus("NE-1001", brand="Isuzu", model="Journey")
    poor_bus = make_bus("NE-1002")
    idle_bus = make_bus("NE-1003")

    good = make_assignment(good_bus, driver)
    add_reading(good, "morning", 1000)
    add_reading(good, "evening", 1400)
    add_fuel(good, 1000, 50)
    add_fuel(good, 1400, 50)

    poor = make_assignment(poor_bus, second_driver)
    add_reading(poor, "morning", 2000)
    add_reading(poor, "evening", 2200)
    add_fuel(poor, 2200, 100)

    return {
        "good_bus": good_bus,
        "poor_bus": poor_bus,
        "idle_bus": idle_bus,
        "driver": driver,
        "second_driver": second_driver,
    }


def test_bus_ranking(client, accountant_headers, fleet):
    response = client.get(f"{URL}/buses", headers=accountant_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["range"] == "month"
    assert body["count"] == 3
    ranked = [(b["regNumber"], b["avgKmPerLiter"], b["rank"], b["status"]) for b in body["data"]]
    assert ranked == [
        ("NE-1001", 4.0, 1, "good"),
        ("NE-1002", 2.0, 2, "poor"),
        ("NE-1003", 0.0, None, "no_data"),
    ]
    assert body["data"][0]["model"] == "Isuzu Journey"
    assert body["data"][0]["totalKm"] == 400
    assert body["data"][0]["totalCost"] == 30000
    assert body["data"][0]["trips"] == 2


def test_bus_efficiency_by_id(client, admin_headers, fleet):
    response = client.get(f"{URL}/buses/{fleet['poor_bus'].id}", params={"range": "week"}, headers=admin_headers)
    body = response.json()
    assert body["range"] == "week"
    assert body["data"]["avgKmPerLiter"] == 2.0
    assert body["data"]["totalFuel"] == 100

    response = client.get(f"{URL}/buses/999", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Bus not found"


def test_bus_full_report(client, admin_headers, fleet):
    response = client.get(f"{URL}/bus/{fleet['good_bus'].id}/full-report", headers=admin_headers)
    report = response.json()["data"]
    assert [d["driverId"] for d in report["driversOperated"]] == [fleet["driver"].id]
    assert report["driversOperated"][0]["kmDriven"] == 400
    assert report["driversOperated"][0]["avgEfficiency"] == 4.0
    assert len(report["fuelEntries"]) == 2
    assert all(e["kmTraveled"] == 400 for e in report["fuelEntries"])
    assert report["fuelEntries"][0]["busRegNumber"] == "NE-1001"


def test_driver_ranking(client, admin_headers, fleet):
    body = client.get(f"{URL}/drivers", headers=admin_headers).json()
    ranked = [(d["name"], d["rank"], d["rating"]) for d in body["data"]]
    assert ranked == [("Kamal Silva", 1, 4.0), ("Ruwan Jayasinghe", 2, 2.0)]
    assert body["data"][0]["licenseNo"] == "EMP-DRV-001"
    assert body["data"][0]["busesOperated"] == []


def test_driver_sees_only_own_report(client, driver_headers, fleet):
    own = client.get(f"{URL}/drivers/{fleet['driver'].id}", headers=driver_headers)
    assert own.status_code == 200
    assert own.json()["data"]["status"] == "good"
    assert own.json()["data"]["busCount"] == 1

    other = client.get(f"{URL}/drivers/{fleet['second_driver'].id}", headers=driver_headers)
    assert other.status_code == 403
    other = client.get(f"{URL}/driver/{fleet['second_driver'].id}/fuel-entries", headers=driver_headers)
    assert other.status_code == 403

    assert client.get(f"{URL}/drivers", headers=driver_headers).status_code == 403


def test_driver_report_needs_a_driver(client, admin_headers, admin, fleet):
    response = client.get(f"{URL}/drivers/{admin.id}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Driver not found"


def test_driver_full_report(client, accountant_headers, fleet):
    driver_id = fleet["driver"].id
    report = client.get(f"{URL}/driver/{driver_id}/full-report", headers=accountant_headers).json()["data"]
    assert report["totalKm"] == 400
    assert [b["regNumber"] for b in report["busesOperated"]] == ["NE-1001"]
    assert len(report["fuelEntries"]) == 2

    buses = client.get(f"{URL}/driver/{driver_id}/buses-operated", headers=accountant_headers).json()
    assert buses["count"] == 1
    assert buses["data"][0]["fuelUsed"] == 100


def test_leaderboard(client, driver_headers, fleet):
    body = client.get(f"{URL}/leaderboard", params={"limit": 1}, headers=driver_headers).json()
    assert [(d["rank"], d["name"]) for d in body["data"]] == [(1, "Kamal Silva")]

    body = client.get(f"{URL}/leaderboard", params={"range": "all"}, headers=driver_headers).json()
    assert [d["rank"] for d in body["data"]] == [1, 2]


def test_efficiency_alerts(client, admin_headers, fleet):
    body = client.get(f"{URL}/alerts", headers=admin_headers).json()
    assert body["range"] == "week"
    alerts = [(a["type"], a["entityId"], a["severity"]) for a in body["data"]]
    assert alerts == [
        ("bus", fleet["poor_bus"].id, "critical"),
        ("driver", fleet["second_driver"].id, "critical"),
    ]
    assert body["data"][0]["efficiency"] == 2.0


def test_empty_fleet(client, admin_headers):
    assert client.get(f"{URL}/leaderboard", headers=admin_headers).json()["data"] == []
    assert client.get(f"{URL}/alerts", headers=admin_headers).json()["data"] == []
