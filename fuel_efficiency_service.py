"""Fuel efficiency reports per bus and per driver.

Distance over a range is the spread of the odometer readings taken in it
(max - min); fuel and cost are summed from the fuel entries in the same range.
"""
import logging
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bus_models import Bus
from efficiency import (
    LOW_EFFICIENCY_THRESHOLD, add_rankings, alert_severity, calculate_rating,
    efficiency_status, entry_trip, km_per_liter, range_start,
)
from trip_models import FuelEntry, OdometerReading
from user_models import User

logger = logging.getLogger(__name__)


def _odometer_spread(db: Session, group_col, since, *conditions) -> dict:
    """{group id: (distance, bus count)} from the readings in range."""
    query = db.query(
        group_col,
        func.max(OdometerReading.reading_km) - func.min(OdometerReading.reading_km),
        func.count(func.distinct(OdometerReading.bus_id)),
    ).filter(*conditions)
    if since:
        query = query.filter(OdometerReading.reading_date >= since)
    return {key: (float(distance or 0), buses) for key, distance, buses in query.group_by(group_col).all()}


def _fuel_totals(db: Session, group_col, since, *conditions) -> dict:
    """{group id: (entries, liters, cost, bus count)} from the fuel entries in range."""
    query = db.query(
        group_col,
        func.count(FuelEntry.id),
        func.coalesce(func.sum(FuelEntry.liters_filled), 0),
        func.coalesce(func.sum(FuelEntry.total_cost), 0),
        func.count(func.distinct(FuelEntry.bus_id)),
    ).filter(*conditions)
    if since:
        query = query.filter(FuelEntry.fuel_date >= since)
    return {
        key: (trips, float(liters), float(cost), buses)
        for key, trips, liters, cost, buses in query.group_by(group_col).all()
    }


def _bus_summary(bus: Bus, distance: float, fuel: tuple) -> dict:
    trips, liters, cost, _ = fuel
    avg = km_per_liter(distance, liters)
    return {
        "busId": bus.id,
        "regNumber": bus.no_plate or "N/A",
        "model": bus.model_full,
        "brand": bus.brand,
        "year": bus.year_of_manufacture,
        "isActive": bus.is_active,
        "totalKm": int(distance),
        "totalFuel": liters,
        "totalCost": cost,
        "trips": trips,
        "avgKmPerLiter": avg,
        "status": efficiency_status(avg),
    }


def _driver_summary(driver: User, odometer: tuple, fuel: tuple) -> dict:
    distance, odometer_buses = odometer
    trips, liters, cost, fuel_buses = fuel
    avg = km_per_liter(distance, liters)
    return {
        "driverId": driver.id,
        "name": driver.name or "N/A",
        "nic": driver.nic or "N/A",
        "phone": driver.mobile or "N/A",
        "licenseNo": driver.employe_number or "N/A",
        "joinDate": driver.created_at,
        "totalKm": int(distance),
        "totalFuel": liters,
        "totalCost": cost,
        "trips": trips,
        "busCount": fuel_buses or odometer_buses,
        "avgKmPerLiter": avg,
        "rating": calculate_rating(avg),
        "status": efficiency_status(avg),
    }


def _share(key, distances: dict, fuel: dict) -> dict:
    """One bus's or driver's slice of a full report."""
    distance = distances.get(key, (0.0, 0))[0]
    trips, liters, cost, _ = fuel[key]
    return {
        "kmDriven": int(distance),
        "fuelUsed": liters,
        "fuelCost": cost,
        "trips": trips,
        "avgEfficiency": km_per_liter(distance, liters),
    }


def _fuel_entries(db: Session, since, *conditions) -> list:
    entries = (
        db.query(FuelEntry)
        .options(joinedload(FuelEntry.bus), joinedload(FuelEntry.driver))
        .filter(*conditions)
    )
    if since:
        entries = entries.filter(FuelEntry.fuel_date >= since)
    entries = entries.order_by(FuelEntry.fuel_date.desc(), FuelEntry.created_at.desc(), FuelEntry.id.desc()).all()

    # that day's morning and evening readings bound each entry's trip
    assignment_ids = {e.assignment_id for e in entries if e.assignment_id}
    readings = {}
    if assignment_ids:
        for reading in db.query(OdometerReading).filter(OdometerReading.assignment_id.in_(sorted(assignment_ids))):
            readings[(reading.assignment_id, reading.reading_date, reading.reading_type)] = reading.reading_km

    rows = []
    for entry in entries:
        trip = entry_trip(
            readings.get((entry.assignment_id, entry.fuel_date, "morning")),
            readings.get((entry.assignment_id, entry.fuel_date, "evening")),
            entry.odometer_at_fueling,
            entry.liters_filled,
        )
        driver, bus = entry.driver, entry.bus
        rows.append({
            "id": entry.id,
            "date": entry.fuel_date,
            "driverId": entry.driver_id,
            "driverName": driver.name if driver else "N/A",
            "driverEmployeeNo": driver.employe_number if driver else None,
            "busId": entry.bus_id,
            "busRegNumber": bus.no_plate if bus else "N/A",
            "busModel": bus.model_full if bus else None,
            "odometerAtFueling": entry.odometer_at_fueling,
            "startOdometer": trip["startOdometer"],
            "endOdometer": trip["endOdometer"],
            "kmTraveled": trip["kmTraveled"],
            "fuelLiters": entry.liters_filled,
            "fuelCost": entry.total_cost,
            "pricePerLiter": entry.price_per_liter,
            "efficiency": trip["efficiency"],
            "station": entry.fuel_station or "N/A",
            "notes": entry.notes,
            "createdAt": entry.created_at,
        })
    return rows


NO_FUEL = (0, 0.0, 0.0, 0)


# buses

def _bus_or_404(db: Session, bus_id: int) -> Bus:
    bus = db.get(Bus, bus_id)
    if not bus:
        raise HTTPException(status_code=404, detail="Bus not found")
    return bus


def buses_efficiency(db: Session, range_name: str = "month") -> list:
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.bus_id, since)
    fuel = _fuel_totals(db, FuelEntry.bus_id, since)
    buses = db.query(Bus).filter(Bus.is_active.is_(True)).order_by(Bus.id).all()
    summaries = [
        _bus_summary(bus, distances.get(bus.id, (0.0, 0))[0], fuel.get(bus.id, NO_FUEL))
        for bus in buses
    ]
    return add_rankings(summaries)


def bus_efficiency(db: Session, bus_id: int, range_name: str = "month") -> dict:
    bus = _bus_or_404(db, bus_id)
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.bus_id, since, OdometerReading.bus_id == bus_id)
    fuel = _fuel_totals(db, FuelEntry.bus_id, since, FuelEntry.bus_id == bus_id)
    return _bus_summary(bus, distances.get(bus_id, (0.0, 0))[0], fuel.get(bus_id, NO_FUEL))


def bus_full_report(db: Session, bus_id: int, range_name: str = "month") -> dict:
    report = bus_efficiency(db, bus_id, range_name)
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.driver_id, since, OdometerReading.bus_id == bus_id)
    fuel = _fuel_totals(db, FuelEntry.driver_id, since, FuelEntry.bus_id == bus_id)

    drivers = []
    if fuel:
        for driver in db.query(User).filter(User.id.in_(list(fuel)), User.role == "driver").all():
            drivers.append(dict(
                driverId=driver.id,
                name=driver.name or "N/A",
                employeeNo=driver.employe_number or "N/A",
                phone=driver.mobile or "N/A",
                nic=driver.nic or "N/A",
                **_share(driver.id, distances, fuel),
            ))
    report["driversOperated"] = sorted(drivers, key=lambda d: d["kmDriven"], reverse=True)
    report["fuelEntries"] = _fuel_entries(db, since, FuelEntry.bus_id == bus_id)
    return report


# drivers

def ensure_driver_access(user: User, driver_id: int):
    if user.role == "driver" and user.id != driver_id:
        logger.info("driver %s denied access to driver %s reports", user.id, driver_id)
        raise HTTPException(status_code=403, detail="Forbidden")


def _driver_or_404(db: Session, driver_id: int) -> User:
    driver = db.get(User, driver_id)
    if not driver or driver.role != "driver":
        raise HTTPException(status_code=404, detail="Driver not found")
    return driver


def drivers_efficiency(db: Session, range_name: str = "month") -> list:
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.driver_id, since)
    fuel = _fuel_totals(db, FuelEntry.driver_id, since)
    drivers = db.query(User).filter(User.role == "driver").order_by(User.id).all()
    summaries = [
        _driver_summary(d, distances.get(d.id, (0.0, 0)), fuel.get(d.id, NO_FUEL))
        for d in drivers
    ]
    return [dict(d, busesOperated=[]) for d in add_rankings(summaries)]


def driver_efficiency(db: Session, driver_id: int, range_name: str = "month") -> dict:
    driver = _driver_or_404(db, driver_id)
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.driver_id, since, OdometerReading.driver_id == driver_id)
    fuel = _fuel_totals(db, FuelEntry.driver_id, since, FuelEntry.driver_id == driver_id)
    return _driver_summary(driver, distances.get(driver_id, (0.0, 0)), fuel.get(driver_id, NO_FUEL))


def driver_buses(db: Session, driver_id: int, range_name: str = "month") -> list:
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.bus_id, since, OdometerReading.driver_id == driver_id)
    fuel = _fuel_totals(db, FuelEntry.bus_id, since, FuelEntry.driver_id == driver_id)
    if not fuel:
        return []
    buses = [
        dict(
            busId=bus.id,
            regNumber=bus.no_plate or "N/A",
            model=bus.model_full,
            brand=bus.brand,
            year=bus.year_of_manufacture,
            **_share(bus.id, distances, fuel),
        )
        for bus in db.query(Bus).filter(Bus.id.in_(list(fuel))).all()
    ]
    return sorted(buses, key=lambda b: b["kmDriven"], reverse=True)


def driver_fuel_entries(db: Session, driver_id: int, range_name: str = "month") -> list:
    return _fuel_entries(db, range_start(range_name), FuelEntry.driver_id == driver_id)


def driver_full_report(db: Session, driver_id: int, range_name: str = "month") -> dict:
    report = driver_efficiency(db, driver_id, range_name)
    report["busesOperated"] = driver_buses(db, driver_id, range_name)
    report["fuelEntries"] = driver_fuel_entries(db, driver_id, range_name)
    return report


# leaderboard and alerts

def leaderboard(db: Session, limit: int = 10, range_name: str = "month") -> list:
    since = range_start(range_name)
    distances = _odometer_spread(db, OdometerReading.driver_id, since)
    fuel = _fuel_totals(db, FuelEntry.driver_id, since)
    fuelled = [key for key, totals in fuel.items() if totals[1] > 0]
    if not fuelled:
        return []

    drivers = db.query(User).filter(User.id.in_(fuelled), User.role == "driver").all()
    board = [_driver_summary(d, distances.get(d.id, (0.0, 0)), fuel[d.id]) for d in drivers]
    board.sort(key=lambda d: d["avgKmPerLiter"], reverse=True)
    return [
        {
            "rank": index,
            "driverId": d["driverId"],
            "name": d["name"],
            "employeeNo": d["licenseNo"],
            "phone": d["phone"],
            "totalKm": d["totalKm"],
            "totalFuel": d["totalFuel"],
            "totalCost": d["totalCost"],
            "trips": d["trips"],
            "busCount": d["busCount"],
            "avgKmPerLiter": d["avgKmPerLiter"],
            "rating": d["rating"],
            "status": d["status"],
        }
        for index, d in enumerate(board[:limit], start=1)
    ]


def _is_low(distance: float, liters: float) -> bool:
    return distance > 0 and liters > 0 and distance / liters < LOW_EFFICIENCY_THRESHOLD


def efficiency_alerts(db: Session, range_name: str = "week") -> list:
    since = range_start(range_name)
    alerts = []

    distances = _odometer_spread(db, OdometerReading.bus_id, since)
    fuel = _fuel_totals(db, FuelEntry.bus_id, since)
    low = [key for key, totals in fuel.items() if _is_low(distances.get(key, (0.0, 0))[0], totals[1])]
    for bus in db.query(Bus).filter(Bus.id.in_(low)).all():
        distance = distances[bus.id][0]
        trips, liters, _, _ = fuel[bus.id]
        efficiency = km_per_liter(distance, liters)
        alerts.append({
            "type": "bus",
            "entityId": bus.id,
            "name": bus.no_plate or "N/A",
            "model": bus.model_full,
            "efficiency": efficiency,
            "totalKm": int(distance),
            "totalFuel": liters,
            "trips": trips,
            "message": "Low fuel efficiency detected",
            "severity": alert_severity(efficiency),
        })

    distances = _odometer_spread(db, OdometerReading.driver_id, since)
    fuel = _fuel_totals(db, FuelEntry.driver_id, since)
    low = [key for key, totals in fuel.items() if _is_low(distances.get(key, (0.0, 0))[0], totals[1])]
    for driver in db.query(User).filter(User.id.in_(low), User.role == "driver").all():
        distance = distances[driver.id][0]
        trips, liters, _, _ = fuel[driver.id]
        efficiency = km_per_liter(distance, liters)
        alerts.append({
            "type": "driver",
            "entityId": driver.id,
            "name": driver.name or "N/A",
            "employeeNo": driver.employe_number or "N/A",
            "efficiency": efficiency,
            "totalKm": int(distance),
            "totalFuel": liters,
            "trips": trips,
            "message": "Below average fuel efficiency",
            "severity": alert_severity(efficiency),
        })

    return sorted(alerts, key=lambda a: a["efficiency"])
