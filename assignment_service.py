import logging
from datetime import datetime
from fastapi import HTTPException
from sqlalchemy import or_, and_, not_
from sqlalchemy.orm import Session

from bus_service import get_bus_or_404
from database import row_to_dict
from driver_assignment import VehicleDriverAssignment
from user_models import User

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("vehicle_id", "employee_id", "start_date", "end_date", "route")


def _check_driver(db: Session, employee_id: int):
    user = db.get(User, employee_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    if user.role != "driver":
        raise HTTPException(status_code=400, detail="User is not a driver")


def _check_dates(start_date, end_date):
    if start_date and end_date and end_date < start_date:
        raise HTTPException(status_code=400, detail="End date cannot be before start date")


def active_clause(now: datetime):
    return and_(
        VehicleDriverAssignment.start_date <= now,
        or_(VehicleDriverAssignment.end_date.is_(None), VehicleDriverAssignment.end_date >= now),
    )


def list_assignments(db: Session, vehicle_id=None, employee_id=None, active=None, limit=None, offset=0) -> list:
    query = db.query(VehicleDriverAssignment)
    if vehicle_id:
        query = query.filter(VehicleDriverAssignment.vehicle_id == vehicle_id)
    if employee_id:
        query = query.filter(VehicleDriverAssignment.employee_id == employee_id)
    if active is not None:
        clause = active_clause(datetime.now())
        query = query.filter(clause if active else not_(clause))
    query = query.order_by(VehicleDriverAssignment.start_date.desc(), VehicleDriverAssignment.id.desc())
    if limit:
        query = query.offset(offset or 0).limit(limit)
    return [row_to_dict(a) for a in query.all()]


def get_assignment_or_404(db: Session, assignment_id: int) -> VehicleDriverAssignment:
    assignment = db.get(VehicleDriverAssignment, assignment_id)
    if not assignment:
        raise HTTPException(status_code=404, detail="Not found")
    return assignment


def get_assignment(db: Session, assignment_id: int) -> dict:
    return row_to_dict(get_assignment_or_404(db, assignment_id))


def create_assignment(db: Session, data: dict) -> dict:
    get_bus_or_404(db, data["vehicle_id"], detail="Vehicle not found")
    _check_driver(db, data["employee_id"])
    if data.get("start_date") is None:
        data["start_date"] = datetime.now()
    _check_dates(data["start_date"], data.get("end_date"))

    assignment = VehicleDriverAssignment(**{k: data.get(k) for k in EDITABLE_FIELDS})
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    logger.info(
        "assigned driver %s to bus %s (assignment %s)",
        assignment.employee_id, assignment.vehicle_id, assignment.id,
    )
    return row_to_dict(assignment)


def update_assignment(db: Session, assignment_id: int, patch: dict) -> dict:
    assignment = get_assignment_or_404(db, assignment_id)
    # only end_date and route may be cleared
    for key in ("vehicle_id", "employee_id", "start_date"):
        if key in patch and patch[key] is None:
            patch.pop(key)
    if patch.get("employee_id") is not None:
        _check_driver(db, patch["employee_id"])
    if patch.get("vehicle_id") is not None:
        get_bus_or_404(db, patch["vehicle_id"], detail="Vehicle not found")
    _check_dates(
        patch.get("start_date", assignment.start_date),
        patch.get("end_date", assignment.end_date),
    )

    for key, value in patch.items():
        if key in EDITABLE_FIELDS:
            setattr(assignment, key, value)
    db.commit()
    db.refresh(assignment)
    return row_to_dict(assignment)


def delete_assignment(db: Session, assignment_id: int):
    assignment = get_assignment_or_404(db, assignment_id)
    db.delete(assignment)
    db.commit()
    logger.info("deleted assignment %s", assignment_id)
