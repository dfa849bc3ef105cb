from datetime import date, datetime

import pytest

from efficiency import (
    add_rankings, alert_severity, assignment_status, calculate_rating, days_remaining,
    efficiency_status, entry_trip, fill_up_report, km_per_liter, range_start, spare_part_distance,
)


def test_range_start():
    today = date(2026, 3, 10)
    assert range_start("week", today) == date(2026, 3, 3)
    assert range_start("month", today) == date(2026, 2, 8)
    assert range_start("year", today) == date(2025, 3, 10)
    assert range_start("fortnight", today) == date(2026, 2, 8)
    assert range_start("all", today) is None


def test_km_per_liter():
    assert km_per_liter(400, 100) == 4.0
    assert km_per_liter(100, 3) == 33.33
    assert km_per_liter(0, 10) == 0.0
    assert km_per_liter(100, 0) == 0.0
    assert km_per_liter(None, None) == 0.0


@pytest.mark.parametrize("efficiency,rating", [
    (5.2, 5.0), (4.7, 4.5), (4.0, 4.0), (3.6, 3.5), (3.0, 3.0), (2.2, 2.2), (0.5, 1.0), (0, 0),
])
def test_calculate_rating(efficiency, rating):
    assert calculate_rating(efficiency) == rating


@pytest.mark.parametrize("efficiency,status", [
    (4.5, "excellent"), (4.2, "good"), (3.7, "average"), (3.2, "below_average"), (1.0, "poor"), (0, "no_data"),
])
def test_efficiency_status(efficiency, status):
    assert efficiency_status(efficiency) == status


def test_alert_severity():
    assert alert_severity(2.4) == "critical"
    assert alert_severity(2.5) == "warning"
    assert alert_severity(2.9) == "warning"


def test_add_rankings_puts_entries_without_data_last():
    ranked = add_rankings([
        {"id": "a", "avgKmPerLiter": 3.0},
        {"id": "b", "avgKmPerLiter": 0},
        {"id": "c", "avgKmPerLiter": 5.1},
    ])
    assert [(r["id"], r["rank"]) for r in ranked] == [("c", 1), ("a", 2), ("b", None)]


def test_entry_trip_prefers_evening_reading():
    trip = entry_trip(1000, 1120, 1100, 40)
    assert trip["kmTraveled"] == 120
    assert trip["efficiency"] == 3.0


def test_entry_trip_falls_back_to_pump_odometer():
    trip = entry_trip(1000, None, 1080, 20)
    assert trip["endOdometer"] == 1080
    assert trip["kmTraveled"] == 80
    assert trip["efficiency"] == 4.0


def test_entry_trip_ignores_backwards_distance():
    trip = entry_trip(1200, None, 1100, 10)
    assert trip["kmTraveled"] == 0
    assert trip["efficiency"] == 0.0


def test_spare_part_distance_status():
    assert spare_part_distance(5000, 500, 1000, None)["status"] == "OK"
    assert spare_part_distance(5000, 500, 1000, None)["distance_remaining"] == 5000

    warning = spare_part_distance(5000, 500, 1000, 5600)
    assert warning["distance_used"] == 4600
    assert warning["distance_remaining"] == 400
    assert warning["status"] == "WARNING"

    assert spare_part_distance(5000, 500, 1000, 6000)["status"] == "CRITICAL"
    assert spare_part_distance(5000, 500, 1000, 6100)["distance_remaining"] == -100


def test_days_remaining():
    today = date(2026, 3, 10)
    assert days_remaining(None, today) is None
    assert days_remaining(datetime(2026, 3, 20, 18, 0), today) == 10
    assert days_remaining(datetime(2026, 3, 1), today) == 0


def test_assignment_status():
    start, end = datetime(2026, 3, 1), datetime(2026, 3, 31)
    assert assignment_status(start, end, now=datetime(2026, 2, 1)) == "upcoming"
    assert assignment_status(start, end, now=datetime(2026, 3, 15)) == "active"
    assert assignment_status(start, end, now=datetime(2026, 4, 1)) == "completed"
    assert assignment_status(start, None, now=datetime(2030, 1, 1)) == "active"


def _fill_up(odometer, liters, cost):
    return {"odometerAtFueling": odometer, "litersFilled": liters, "totalCost": cost}


def test_fill_up_report_needs_two_entries():
    report = fill_up_report([_fill_up(1000, 40, 12000)])
    assert report == {"hasData": False, "message": "Need at least 2 fuel entries to calculate efficiency"}


def test_fill_up_report_without_distance():
    report = fill_up_report([_fill_up(1000, 10, 3000), _fill_up(1000, 10, 3000)])
    assert report["hasData"] is False
    assert report["message"] == "Not enough valid data to calculate efficiency"


def test_fill_up_report_between_consecutive_fill_ups():
    # newest first, the way entries come out of the database
    report = fill_up_report([
        _fill_up(1800, 80, 24000),
        _fill_up(1000, 40, 12000),
        _fill_up(1400, 100, 30000),
    ])
    assert report["hasData"] is True
    assert [e["kmPerLiter"] for e in report["efficiencyData"]] == [4.0, 5.0]
    assert [e["costPerKm"] for e in report["efficiencyData"]] == [75.0, 60.0]
    assert report["totalDistance"] == 800
    assert report["totalLiters"] == 180
    assert report["totalCost"] == 54000
    assert report["avgKmPerLiter"] == 4.44
    assert report["avgCostPerKm"] == 67.5
    assert report["avgDistancePerDay"] == 400
    assert report["bestEfficiency"] == 5.0
    assert report["worstEfficiency"] == 4.0
    assert report["projectedWeeklyCost"] == 189000
    assert report["projectedMonthlyLiters"] == 2700
    assert report["numberOfRecords"] == 2
