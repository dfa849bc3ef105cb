"""Derived fleet figures: distances, km/L, ratings and status labels.

Everything here is plain arithmetic over values already pulled from the
database, so the services stay thin and these rules can be tested directly.
"""
from datetime import date, datetime, timedelta
from typing import Iterable, List, Optional

RANGE_DAYS = {"week": 7, "month": 30, "quarter": 90, "year": 365}
DEFAULT_RANGE_DAYS = 30

LOW_EFFICIENCY_THRESHOLD = 3.0
CRITICAL_EFFICIENCY_THRESHOLD = 2.5


def range_start(range_name: Optional[str], today: Optional[date] = None) -> Optional[date]:
    """First day covered by a report range; None for 'all'."""
    if range_name == "all":
        return None
    today = today or date.today()
    return today - timedelta(days=RANGE_DAYS.get(range_name, DEFAULT_RANGE_DAYS))


def round2(value) -> float:
    return round(float(value or 0), 2)


def km_per_liter(distance, liters) -> float:
    distance = float(distance or 0)
    liters = float(liters or 0)
    if distance <= 0 or liters <= 0:
        return 0.0
    return round2(distance / liters)


def calculate_rating(avg_km_per_liter) -> float:
    efficiency = float(avg_km_per_liter or 0)
    for floor in (5.0, 4.5, 4.0, 3.5, 3.0):
        if efficiency >= floor:
            return floor
    if efficiency > 0:
        return max(1.0, efficiency)
    return 0


def efficiency_status(avg_km_per_liter) -> str:
    efficiency = float(avg_km_per_liter or 0)
    if efficiency >= 4.5:
        return "excellent"
    if efficiency >= 4.0:
        return "good"
    if efficiency >= 3.5:
        return "average"
    if efficiency >= 3.0:
        return "below_average"
    if efficiency > 0:
        return "poor"
    return "no_data"


def alert_severity(efficiency) -> str:
    return "critical" if float(efficiency or 0) < CRITICAL_EFFICIENCY_THRESHOLD else "warning"


def add_rankings(items: Iterable[dict], field: str = "avgKmPerLiter") -> List[dict]:
    """Rank items with data by descending efficiency; the rest get rank None."""
    items = list(items)
    with_data = sorted(
        (item for item in items if float(item.get(field) or 0) > 0),
        key=lambda item: float(item[field]),
        reverse=True,
    )
    without_data = [item for item in items if float(item.get(field) or 0) <= 0]
    ranked = [dict(item, rank=index) for index, item in enumerate(with_data, start=1)]
    return ranked + [dict(item, rank=None) for item in without_data]


def entry_trip(start_odometer, end_odometer, odometer_at_fueling, fuel_liters) -> dict:
    """Distance and km/L for one fuel entry from that day's readings.

    The evening reading closes the trip; without one the odometer noted at
    the pump is used instead.
    """
    start = float(start_odometer or 0)
    end = float(end_odometer or 0) or float(odometer_at_fueling or 0)
    km_traveled = end - start if end > start else 0
    return {
        "startOdometer": start,
        "endOdometer": end,
        "kmTraveled": km_traveled,
        "efficiency": km_per_liter(km_traveled, fuel_liters),
    }


def spare_part_distance(distance_limit, boundary_limit, install_odometer, current_odometer=None) -> dict:
    """Usage of an installed part against its distance budget.

    CRITICAL once the budget is spent, WARNING inside the boundary window.
    """
    install = float(install_odometer or 0)
    current = install if current_odometer is None else float(current_odometer)
    used = current - install
    remaining = float(distance_limit) - used
    if remaining <= 0:
        status = "CRITICAL"
    elif remaining <= float(boundary_limit):
        status = "WARNING"
    else:
        status = "OK"
    return {
        "current_odometer": current,
        "distance_used": used,
        "distance_remaining": remaining,
        "status": status,
    }


def days_remaining(end_date, today: Optional[date] = None) -> Optional[int]:
    if end_date is None:
        return None
    today = today or date.today()
    if isinstance(end_date, datetime):
        end_date = end_date.date()
    return max((end_date - today).days, 0)


def assignment_status(start_date: datetime, end_date: Optional[datetime], now: Optional[datetime] = None) -> str:
    now = now or datetime.now()
    if now < start_date:
        return "upcoming"
    if end_date is not None and now > end_date:
        return "completed"
    return "active"


def fill_up_report(entries: List[dict]) -> dict:
    """Efficiency between consecutive fill-ups of one bus.

    Each fill-up refuels what was burnt since the previous one, so the
    liters of fill-up i are divided by the distance from fill-up i-1. The
    first fill-up only opens the window.
    """
    if len(entries) < 2:
        return {"hasData": False, "message": "Need at least 2 fuel entries to calculate efficiency"}

    ordered = sorted(entries, key=lambda e: float(e["odometerAtFueling"]))
    efficiency_data = []
    for previous, current in zip(ordered, ordered[1:]):
        distance = float(current["odometerAtFueling"]) - float(previous["odometerAtFueling"])
        liters = float(current["litersFilled"])
        if distance > 0 and liters > 0:
            efficiency_data.append(dict(
                current,
                distanceTraveled=distance,
                kmPerLiter=round2(distance / liters),
                costPerKm=round2(float(current["totalCost"]) / distance),
            ))

    if not efficiency_data:
        return {"hasData": False, "message": "Not enough valid data to calculate efficiency"}

    total_distance = float(ordered[-1]["odometerAtFueling"]) - float(ordered[0]["odometerAtFueling"])
    total_liters = sum(float(e["litersFilled"]) for e in ordered[1:])
    total_cost = sum(float(e["totalCost"]) for e in ordered[1:])
    records = len(efficiency_data)

    avg_cost_per_day = total_cost / records
    avg_liters_per_day = total_liters / records
    values = [e["kmPerLiter"] for e in efficiency_data]

    return {
        "hasData": True,
        "efficiencyData": efficiency_data,
        "totalDistance": total_distance,
        "totalLiters": total_liters,
        "totalCost": total_cost,
        "avgKmPerLiter": km_per_liter(total_distance, total_liters),
        "avgCostPerKm": round2(total_cost / total_distance),
        "avgCostPerDay": round2(avg_cost_per_day),
        "avgLitersPerDay": round2(avg_liters_per_day),
        "avgDistancePerDay": round2(total_distance / records),
        "bestEfficiency": round2(max(values)),
        "worstEfficiency": round2(min(values)),
        "projectedWeeklyCost": round2(avg_cost_per_day * 7),
        "projectedMonthlyCost": round2(avg_cost_per_day * 30),
        "projectedWeeklyLiters": round2(avg_liters_per_day * 7),
        "projectedMonthlyLiters": round2(avg_liters_per_day * 30),
        "numberOfRecords": records,
    }
