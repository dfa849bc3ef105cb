"""Driver workspace: the day's assignment, fitness check, odometer and fuel.

Responses use camelCase keys since the driver app reads them directly.
"""
import logging
from datetime import date, datetime, time, timedelta
from fastapi import HTTPException
from pydantic.alias_generators import to_camel
from sqlalchemy import and_, case, func, or_
from sqlalchemy.orm import Session, aliased, joinedload

from bus_service import get_bus_or_404
from database import row_to_dict
from driver_assignment import VehicleDriverAssignment
from efficiency import assignment_status, days_remaining, fill_up_report
from fitness_models import BusFitness
from fitness_service import covering_clause
from trip_models import FuelEntry, OdometerReading

logger = logging.getLogger(__name__)

EMPTY_ODOMETER = {
    "morning": None,
    "evening": None,
    "morningSubmitted": False,
    "eveningSubmitted": False,
    "todayDistance": 0,
}


def camel_row(obj) -> dict:
    return {to_camel(key): value for key, value in row_to_dict(obj).items()}


def assignment_dict(assignment: VehicleDriverAssignment) -> dict:
    bus, driver = assignment.bus, assignment.driver
    return {
        "assignmentId": assignment.id,
        "vehicleId": assignment.vehicle_id,
        "employeeId": assignment.employee_id,
        "startDate": assignment.start_date,
        "endDate": assignment.end_date,
        "route": assignment.route,
        "createdAt": assignment.created_at,
        "updatedAt": assignment.update_at,
        "busId": bus.id,
        "busNumber": bus.no_plate,
        "busBrand": bus.brand,
        "busModel": bus.model,
        "numberOfSeats": bus.number_of_seats,
        "fuelType": bus.fuel_type,
        "fuelTankCapacity": bus.fuel_tank_capacity,
        "engineCc": bus.engine_cc,
        "yearOfManufacture": bus.year_of_manufacture,
        "driverName": driver.name if driver else None,
        "driverEmployeeNumber": driver.employe_number if driver else None,
    }


def _pair_dict(morning: OdometerReading, evening: OdometerReading) -> dict:
    return {
        "assignmentId": morning.assignment_id,
        "driverId": morning.driver_id,
        "busId": morning.bus_id,
        "readingDate": morning.reading_date,
        "morningReading": morning.reading_km,
        "eveningReading": evening.reading_km if evening else None,
        "distanceTraveled": evening.reading_km - morning.reading_km if evening else 0,
        "morningSubmittedAt": morning.submitted_at,
        "eveningSubmittedAt": evening.submitted_at if evening else None,
    }


def _daily_pairs(db: Session, bus_id: int):
    """Morning readings of a bus joined with the evening reading of the same day."""
    morning = aliased(OdometerReading)
    evening = aliased(OdometerReading)
    query = (
        db.query(morning, evening)
        .outerjoin(
            evening,
            and_(
                evening.bus_id == morning.bus_id,
                evening.reading_date == morning.reading_date,
                evening.reading_type == "evening",
            ),
        )
        .filter(morning.bus_id == bus_id, morning.reading_type == "morning")
        .order_by(morning.reading_date.desc())
    )
    return query, morning


# assignments

def find_today_assignment(db: Session, driver_id: int, target: date = None) -> VehicleDriverAssignment:
    return (
        db.query(VehicleDriverAssignment)
        .join(VehicleDriverAssignment.bus)
        .options(joinedload(VehicleDriverAssignment.driver))
        .filter(VehicleDriverAssignment.employee_id == driver_id, covering_clause(target or date.today()))
        .order_by(VehicleDriverAssignment.start_date.desc())
        .first()
    )


def get_today_assignment(db: Session, driver_id: int, target: date = None):
    assignment = find_today_assignment(db, driver_id, target)
    if not assignment:
        return None
    data = assignment_dict(assignment)
    data["busModelFull"] = assignment.bus.model_full
    data["daysRemaining"] = days_remaining(assignment.end_date)
    data["status"] = assignment_status(assignment.start_date, assignment.end_date)
    return data


def get_active_assignments(db: Session, driver_id: int) -> list:
    today_start = datetime.combine(date.today(), time.min)
    assignments = (
        db.query(VehicleDriverAssignment)
        .join(VehicleDriverAssignment.bus)
        .options(joinedload(VehicleDriverAssignment.driver))
        .filter(
            VehicleDriverAssignment.employee_id == driver_id,
            or_(VehicleDriverAssignment.end_date.is_(None), VehicleDriverAssignment.end_date >= today_start),
        )
        .order_by(VehicleDriverAssignment.start_date.asc())
        .all()
    )
    return [assignment_dict(a) for a in assignments]


def resolve_target(db: Session, driver_id: int, assignment_id: int = None, bus_id: int = None):
    """Assignment and bus a submission is recorded against.

    Without an explicit assignment the caller's assignment for today is used.
    """
    if assignment_id is None:
        assignment = find_today_assignment(db, driver_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="No active assignment found")
    else:
        assignment = db.get(VehicleDriverAssignment, assignment_id)
        if not assignment:
            raise HTTPException(status_code=404, detail="Assignment not found")
        if assignment.employee_id != driver_id:
            raise HTTPException(status_code=403, detail="Not authorized for this assignment")
    if bus_id and bus_id != assignment.vehicle_id:
        raise HTTPException(status_code=400, detail="Bus does not match the assignment")
    bus_id = bus_id or assignment.vehicle_id
    get_bus_or_404(db, bus_id)
    return assignment.id, bus_id


# fitness

def _fitness_for(db: Session, assignment_id: int, check_date: date):
    return (
        db.query(BusFitness)
        .filter(BusFitness.assignment_id == assignment_id, BusFitness.check_date == check_date)
        .first()
    )


def get_fitness_check(db: Session, assignment_id: int, target: date = None):
    record = _fitness_for(db, assignment_id, target or date.today())
    return camel_row(record) if record else None


def submit_fitness_check(db: Session, driver_id: int, data: dict) -> dict:
    assignment_id, bus_id = resolve_target(db, driver_id, data.get("assignment_id"), data.get("bus_id"))
    check_date = data.get("check_date") or date.today()
    fields = {
        "oil_level": data["oil_level"],
        "oil_checked": data["oil_checked"],
        "water_level": data["water_level"],
        "water_checked": data["water_checked"],
        "notes": data.get("notes") or "",
        "submitted_at": datetime.now(),
    }

    record = _fitness_for(db, assignment_id, check_date)
    if record:
        for key, value in fields.items():
            setattr(record, key, value)
    else:
        record = BusFitness(
            assignment_id=assignment_id,
            driver_id=driver_id,
            bus_id=bus_id,
            check_date=check_date,
            **fields,
        )
        db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("fitness check for assignment %s on %s saved by driver %s", assignment_id, check_date, driver_id)
    return camel_row(record)


def get_fitness_history(db: Session, bus_id: int, limit: int = 30) -> list:
    records = (
        db.query(BusFitness)
        .filter(BusFitness.bus_id == bus_id)
        .order_by(BusFitness.check_date.desc())
        .limit(limit)
        .all()
    )
    return [camel_row(r) for r in records]


# odometer

def get_today_readings(db: Session, assignment_id: int, target: date = None) -> dict:
    readings = (
        db.query(OdometerReading)
        .filter(
            OdometerReading.assignment_id == assignment_id,
            OdometerReading.reading_date == (target or date.today()),
        )
        .all()
    )
    by_type = {r.reading_type: r for r in readings}
    morning, evening = by_type.get("morning"), by_type.get("evening")
    today_distance = 0
    if morning and evening:
        today_distance = evening.reading_km - morning.reading_km
    return {
        "morning": camel_row(morning) if morning else None,
        "evening": camel_row(evening) if evening else None,
        "morningSubmitted": morning is not None,
        "eveningSubmitted": evening is not None,
        "todayDistance": today_distance,
    }


def get_previous_day_readings(db: Session, bus_id: int, before: date = None):
    query, morning = _daily_pairs(db, bus_id)
    row = query.filter(morning.reading_date < (before or date.today())).first()
    return _pair_dict(*row) if row else None


def get_odometer_readings(db: Session, driver_id: int, assignment_id: int = None, target: date = None) -> dict:
    bus_id = None
    if assignment_id is None:
        assignment = find_today_assignment(db, driver_id, target)
        if not assignment:
            return dict(EMPTY_ODOMETER, previousDay=None)
        assignment_id, bus_id = assignment.id, assignment.vehicle_id

    readings = get_today_readings(db, assignment_id, target)
    readings["previousDay"] = get_previous_day_readings(db, bus_id, target) if bus_id else None
    return readings


def latest_reading(db: Session, bus_id: int, exclude=None) -> float:
    """Most recent reading of a bus; the evening reading wins within a day."""
    query = db.query(OdometerReading.reading_km).filter(OdometerReading.bus_id == bus_id)
    if exclude is not None:
        assignment_id, reading_type, reading_date = exclude
        query = query.filter(~and_(
            OdometerReading.assignment_id == assignment_id,
            OdometerReading.reading_type == reading_type,
            OdometerReading.reading_date == reading_date,
        ))
    row = query.order_by(
        OdometerReading.reading_date.desc(),
        case((OdometerReading.reading_type == "evening", 1), else_=2),
    ).first()
    return row[0] if row else 0


def submit_odometer_reading(db: Session, driver_id: int, data: dict) -> dict:
    assignment_id, bus_id = resolve_target(db, driver_id, data.get("assignment_id"), data.get("bus_id"))
    reading_type = data["reading_type"]
    reading_km = data["reading_km"]
    reading_date = data.get("reading_date") or date.today()

    previous = latest_reading(db, bus_id, exclude=(assignment_id, reading_type, reading_date))
    if previous and reading_km < previous:
        raise HTTPException(
            status_code=400,
            detail=f"Reading ({reading_km} km) cannot be less than previous reading ({previous} km)",
        )

    existing = {
        r.reading_type: r
        for r in db.query(OdometerReading).filter(
            OdometerReading.assignment_id == assignment_id,
            OdometerReading.reading_date == reading_date,
        )
    }
    if reading_type == "evening":
        morning = existing.get("morning")
        if not morning:
            raise HTTPException(status_code=400, detail="Morning reading must be submitted before evening reading")
        if reading_km < morning.reading_km:
            raise HTTPException(
                status_code=400,
                detail=f"Evening reading ({reading_km} km) cannot be less than morning reading ({morning.reading_km} km)",
            )

    reading = existing.get(reading_type)
    if reading:
        reading.reading_km = reading_km
        reading.submitted_at = datetime.now()
    else:
        reading = OdometerReading(
            assignment_id=assignment_id,
            driver_id=driver_id,
            bus_id=bus_id,
            reading_type=reading_type,
            reading_km=reading_km,
            reading_date=reading_date,
            submitted_at=datetime.now(),
        )
        db.add(reading)
    db.commit()
    db.refresh(reading)
    logger.info("%s odometer %s km recorded for bus %s", reading_type, reading_km, bus_id)
    return camel_row(reading)


def get_odometer_history(db: Session, bus_id: int, days: int = 30) -> list:
    query, morning = _daily_pairs(db, bus_id)
    since = date.today() - timedelta(days=days)
    return [_pair_dict(m, e) for m, e in query.filter(morning.reading_date >= since).all()]


# fuel

def get_fuel_entries(db: Session, bus_id: int, limit: int = 50) -> list:
    entries = (
        db.query(FuelEntry)
        .filter(FuelEntry.bus_id == bus_id)
        .order_by(FuelEntry.odometer_at_fueling.desc())
        .limit(limit)
        .all()
    )
    return [camel_row(e) for e in entries]


def get_driver_fuel_entries(db: Session, driver_id: int, limit: int = 50) -> list:
    entries = (
        db.query(FuelEntry)
        .filter(FuelEntry.driver_id == driver_id)
        .order_by(FuelEntry.created_at.desc(), FuelEntry.id.desc())
        .limit(limit)
        .all()
    )
    return [camel_row(e) for e in entries]


def submit_fuel_entry(db: Session, driver_id: int, data: dict) -> dict:
    assignment_id, bus_id = resolve_target(db, driver_id, data.get("assignment_id"), data.get("bus_id"))
    total_cost = data.get("total_cost") or data["liters_filled"] * data["price_per_liter"]
    entry = FuelEntry(
        assignment_id=assignment_id,
        driver_id=driver_id,
        bus_id=bus_id,
        odometer_at_fueling=data["odometer_at_fueling"],
        liters_filled=data["liters_filled"],
        price_per_liter=data["price_per_liter"],
        total_cost=total_cost,
        fuel_station=data["fuel_station"],
        notes=data.get("notes") or "",
        fuel_date=data.get("fuel_date") or date.today(),
    )
    db.add(entry)
    db.commit()
    db.refresh(entry)
    logger.info("fuel entry %s: %s L for bus %s", entry.id, entry.liters_filled, bus_id)
    return camel_row(entry)


def get_fuel_efficiency_report(db: Session, bus_id: int, limit: int = 50) -> dict:
    return fill_up_report(get_fuel_entries(db, bus_id, limit))


def get_fuel_cost_summary(db: Session, bus_id: int, start_date: date, end_date: date) -> dict:
    total_cost, total_liters, entries = (
        db.query(
            func.coalesce(func.sum(FuelEntry.total_cost), 0),
            func.coalesce(func.sum(FuelEntry.liters_filled), 0),
            func.count(FuelEntry.id),
        )
        .filter(
            FuelEntry.bus_id == bus_id,
            FuelEntry.fuel_date >= start_date,
            FuelEntry.fuel_date <= end_date,
        )
        .one()
    )
    return {"totalCost": float(total_cost), "totalLiters": float(total_liters), "entries": int(entries)}


# dashboard

def get_dashboard(db: Session, driver_id: int, target: date = None) -> dict:
    assignment = get_today_assignment(db, driver_id, target)
    if not assignment:
        return {"hasAssignment": False, "message": "No active assignment for today"}

    bus_id = assignment["vehicleId"]
    odometer = get_today_readings(db, assignment["assignmentId"], target)
    odometer["previousDay"] = get_previous_day_readings(db, bus_id, target)
    return {
        "hasAssignment": True,
        "assignment": assignment,
        "fitnessCheck": get_fitness_check(db, assignment["assignmentId"], target),
        "odometer": odometer,
        "fuel": {
            "recentEntries": get_fuel_entries(db, bus_id, 10),
            "efficiencyReport": get_fuel_efficiency_report(db, bus_id, 20),
        },
    }


def get_quick_stats(db: Session, driver_id: int, target: date = None):
    assignment = find_today_assignment(db, driver_id, target)
    if not assignment:
        return None

    fitness = get_fitness_check(db, assignment.id, target)
    odometer = get_today_readings(db, assignment.id, target)
    report = get_fuel_efficiency_report(db, assignment.vehicle_id, 20)
    return {
        "fitnessStatus": "completed" if fitness and fitness["submittedAt"] else "pending",
        "oilLevel": fitness["oilLevel"] if fitness else "N/A",
        "waterLevel": fitness["waterLevel"] if fitness else "N/A",
        "todayDistance": odometer["todayDistance"],
        "avgEfficiency": report["avgKmPerLiter"] if report["hasData"] else None,
        "avgCostPerKm": report["avgCostPerKm"] if report["hasData"] else None,
    }
