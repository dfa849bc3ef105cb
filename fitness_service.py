import logging
from datetime import date, datetime, time
from fastapi import HTTPException
from sqlalchemy import func, case, and_, or_
from sqlalchemy.orm import Session, joinedload

from bus_models import Bus
from database import row_to_dict
from driver_assignment import VehicleDriverAssignment
from fitness_models import BusFitness, LEVELS
from user_models import User

logger = logging.getLogger(__name__)

SORT_COLUMNS = {
    "id": BusFitness.id,
    "check_date": BusFitness.check_date,
    "submitted_at": BusFitness.submitted_at,
    "bus_id": BusFitness.bus_id,
    "driver_id": BusFitness.driver_id,
}


def fitness_dict(record: BusFitness) -> dict:
    data = row_to_dict(record)
    data["driver_name"] = record.driver.name if record.driver else None
    data["bus_plate"] = record.bus.no_plate if record.bus else None
    data["bus_brand"] = record.bus.brand if record.bus else None
    data["bus_model"] = record.bus.model if record.bus else None
    return data


def _with_details(db: Session):
    return db.query(BusFitness).options(joinedload(BusFitness.driver), joinedload(BusFitness.bus))


def covering_clause(target: date):
    """Assignments whose date range includes the given day."""
    day_start = datetime.combine(target, time.min)
    day_end = datetime.combine(target, time.max)
    return and_(
        VehicleDriverAssignment.start_date <= day_end,
        or_(VehicleDriverAssignment.end_date.is_(None), VehicleDriverAssignment.end_date >= day_start),
    )


def list_records(db: Session, page: int = 1, limit: int = 20, sort_by: str = "check_date", order: str = "DESC") -> dict:
    column = SORT_COLUMNS.get(sort_by, BusFitness.check_date)
    column = column.asc() if order.upper() == "ASC" else column.desc()
    records = (
        _with_details(db)
        .order_by(column, BusFitness.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    total = db.query(func.count(BusFitness.id)).scalar()
    return {
        "records": [fitness_dict(r) for r in records],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "totalPages": -(-total // limit),
        },
    }


def records_by_date(db: Session, check_date: date) -> list:
    records = (
        _with_details(db)
        .filter(BusFitness.check_date == check_date)
        .order_by(BusFitness.submitted_at.desc(), BusFitness.id.desc())
        .all()
    )
    return [fitness_dict(r) for r in records]


def records_by_bus(db: Session, bus_id: int, start_date: date = None, end_date: date = None) -> list:
    query = _with_details(db).filter(BusFitness.bus_id == bus_id)
    if start_date:
        query = query.filter(BusFitness.check_date >= start_date)
    if end_date:
        query = query.filter(BusFitness.check_date <= end_date)
    records = query.order_by(BusFitness.check_date.desc(), BusFitness.submitted_at.desc()).all()
    return [fitness_dict(r) for r in records]


def bus_history(db: Session, bus_id: int, limit: int = 50) -> list:
    records = (
        _with_details(db)
        .options(joinedload(BusFitness.assignment))
        .filter(BusFitness.bus_id == bus_id)
        .order_by(BusFitness.check_date.desc(), BusFitness.submitted_at.desc())
        .limit(limit)
        .all()
    )
    history = []
    for record in records:
        data = fitness_dict(record)
        driver = record.driver
        data["driver_mobile"] = driver.mobile if driver else None
        data["driver_employee_number"] = driver.employe_number if driver else None
        assignment = record.assignment
        data["assignment_route"] = assignment.route if assignment else None
        data["assignment_start"] = assignment.start_date if assignment else None
        data["assignment_end"] = assignment.end_date if assignment else None
        history.append(data)
    return history


def check_status(db: Session, check_date: date) -> list:
    """Every active bus with its latest fitness check of the day, if any."""
    checks = (
        _with_details(db)
        .filter(BusFitness.check_date == check_date)
        .order_by(BusFitness.submitted_at.asc(), BusFitness.id.asc())
        .all()
    )
    latest = {}
    for check in checks:
        latest[check.bus_id] = check

    status = []
    for bus in db.query(Bus).filter(Bus.is_active.is_(True)).order_by(Bus.no_plate).all():
        check = latest.get(bus.id)
        status.append({
            "bus_id": bus.id,
            "no_plate": bus.no_plate,
            "brand": bus.brand,
            "model": bus.model,
            "is_active": bus.is_active,
            "oil_checked": bool(check and check.oil_checked),
            "water_checked": bool(check and check.water_checked),
            "oil_level": check.oil_level if check else None,
            "water_level": check.water_level if check else None,
            "driver_name": check.driver.name if check and check.driver else None,
            "submitted_at": check.submitted_at if check else None,
        })
    return status


def assignments_with_status(db: Session, check_date: date = None) -> dict:
    check_date = check_date or date.today()
    rows = (
        db.query(VehicleDriverAssignment, BusFitness)
        .outerjoin(
            BusFitness,
            and_(
                BusFitness.assignment_id == VehicleDriverAssignment.id,
                BusFitness.check_date == check_date,
            ),
        )
        .options(joinedload(VehicleDriverAssignment.bus), joinedload(VehicleDriverAssignment.driver))
        .filter(covering_clause(check_date))
        .order_by(VehicleDriverAssignment.start_date.desc())
        .all()
    )
    assignments = []
    for assignment, check in rows:
        driver, bus = assignment.driver, assignment.bus
        assignments.append({
            "id": assignment.id,
            "bus_id": assignment.vehicle_id,
            "driver_id": assignment.employee_id,
            "route": assignment.route,
            "start_date": assignment.start_date,
            "end_date": assignment.end_date,
            "driver_name": driver.name if driver else None,
            "driver_mobile": driver.mobile if driver else None,
            "bus_plate": bus.no_plate if bus else None,
            "bus_brand": bus.brand if bus else None,
            "bus_model": bus.model if bus else None,
            "fitness_id": check.id if check else None,
            "oil_level": check.oil_level if check else None,
            "oil_checked": check.oil_checked if check else None,
            "water_level": check.water_level if check else None,
            "water_checked": check.water_checked if check else None,
            "fitness_notes": check.notes if check else None,
            "check_submitted_at": check.submitted_at if check else None,
            "has_checked": check is not None,
        })
    return {"assignments": assignments, "date": check_date}


def get_record_or_404(db: Session, record_id: int) -> BusFitness:
    record = db.get(BusFitness, record_id)
    if not record:
        raise HTTPException(status_code=404, detail="Fitness record not found")
    return record


def get_record(db: Session, record_id: int) -> dict:
    return fitness_dict(get_record_or_404(db, record_id))


def create_record(db: Session, data: dict, driver_id: int) -> dict:
    check_date = data.get("check_date") or date.today()
    assignment = db.get(VehicleDriverAssignment, data["assignment_id"])
    if not assignment:
        raise HTTPException(status_code=404, detail="Assignment not found")
    if assignment.vehicle_id != data["bus_id"]:
        raise HTTPException(status_code=400, detail="Bus does not match the assignment")

    existing = (
        db.query(BusFitness)
        .filter(BusFitness.assignment_id == assignment.id, BusFitness.check_date == check_date)
        .first()
    )
    if existing:
        raise HTTPException(status_code=409, detail="Fitness check already submitted for this assignment today")

    record = BusFitness(
        assignment_id=assignment.id,
        driver_id=driver_id,
        bus_id=data["bus_id"],
        oil_level=data.get("oil_level") or "full",
        oil_checked=data.get("oil_checked", True),
        water_level=data.get("water_level") or "full",
        water_checked=data.get("water_checked", True),
        notes=data.get("notes") or "",
        check_date=check_date,
        submitted_at=datetime.now(),
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("fitness check %s recorded for bus %s on %s", record.id, record.bus_id, check_date)
    return fitness_dict(record)


def update_record(db: Session, record_id: int, patch: dict, user: User) -> dict:
    record = get_record_or_404(db, record_id)
    if user.role != "admin" and user.id != record.driver_id:
        raise HTTPException(status_code=403, detail="Not authorized to update this record")
    for key, value in patch.items():
        if value is not None or key == "notes":
            setattr(record, key, value if value is not None else "")
    db.commit()
    db.refresh(record)
    return fitness_dict(record)


def delete_record(db: Session, record_id: int) -> dict:
    record = get_record_or_404(db, record_id)
    db.delete(record)
    db.commit()
    return {"success": True}


def summary(db: Session, start_date: date = None, end_date: date = None) -> dict:
    def count_when(condition):
        return func.sum(case((condition, 1), else_=0))

    query = db.query(
        func.count(BusFitness.id).label("total_checks"),
        count_when(BusFitness.oil_checked.is_(True)).label("oil_checks_done"),
        count_when(BusFitness.water_checked.is_(True)).label("water_checks_done"),
        *[count_when(BusFitness.oil_level == level).label(f"oil_{level}_count") for level in LEVELS],
        *[count_when(BusFitness.water_level == level).label(f"water_{level}_count") for level in LEVELS],
        func.count(func.distinct(BusFitness.bus_id)).label("buses_checked"),
        func.count(func.distinct(BusFitness.driver_id)).label("drivers_active"),
        func.count(func.distinct(BusFitness.check_date)).label("days_with_checks"),
    )
    if start_date:
        query = query.filter(BusFitness.check_date >= start_date)
    if end_date:
        query = query.filter(BusFitness.check_date <= end_date)
    row = query.one()
    return {key: int(value or 0) for key, value in row._mapping.items()}
