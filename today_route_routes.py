from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import require_roles
from database import get_db
from today_route_schema import SubmitFitnessCheck, SubmitOdometerReading, SubmitFuelEntry
from user_models import User
import today_route_service

router = APIRouter(prefix="/driver/today-route", tags=["today route"])

route_user = require_roles("driver", "admin")


@router.get("")
def get_dashboard(
    target: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    return {"success": True, "data": today_route_service.get_dashboard(db, current_user.id, target)}


@router.get("/stats")
def get_quick_stats(
    target: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    stats = today_route_service.get_quick_stats(db, current_user.id, target)
    if stats is None:
        return {"success": True, "data": None, "message": "No active assignment found"}
    return {"success": True, "data": stats}


# assignment

@router.get("/assignment")
def get_today_assignment(
    target: Optional[date] = Query(None, alias="date"),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    assignment = today_route_service.get_today_assignment(db, current_user.id, target)
    if assignment is None:
        return {"success": True, "data": None, "message": "No active assignment found for today"}
    return {"success": True, "data": assignment}


@router.get("/assignments/active")
def get_active_assignments(db: Session = Depends(get_db), current_user: User = Depends(route_user)):
    return {"success": True, "data": today_route_service.get_active_assignments(db, current_user.id)}


# fitness

@router.get("/fitness/history", dependencies=[Depends(route_user)])
def get_fitness_history(
    bus_id: int = Query(..., alias="busId"),
    limit: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": today_route_service.get_fitness_history(db, bus_id, limit)}


@router.get("/fitness")
def get_fitness_check(
    target: Optional[date] = Query(None, alias="date"),
    assignment_id: Optional[int] = Query(None, alias="assignmentId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    if assignment_id is None:
        assignment = today_route_service.find_today_assignment(db, current_user.id, target)
        if not assignment:
            return {"success": True, "data": None, "message": "No active assignment found"}
        assignment_id = assignment.id
    return {"success": True, "data": today_route_service.get_fitness_check(db, assignment_id, target)}


@router.post("/fitness", status_code=201)
def submit_fitness_check(
    check: SubmitFitnessCheck,
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    record = today_route_service.submit_fitness_check(db, current_user.id, check.model_dump())
    return {"success": True, "message": "Fitness check submitted successfully", "data": record}


# odometer

@router.get("/odometer/history", dependencies=[Depends(route_user)])
def get_odometer_history(
    bus_id: int = Query(..., alias="busId"),
    days: int = Query(30, ge=1, le=365),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": today_route_service.get_odometer_history(db, bus_id, days)}


@router.get("/odometer")
def get_odometer_readings(
    target: Optional[date] = Query(None, alias="date"),
    assignment_id: Optional[int] = Query(None, alias="assignmentId"),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    readings = today_route_service.get_odometer_readings(db, current_user.id, assignment_id, target)
    return {"success": True, "data": readings}


@router.post("/odometer", status_code=201)
def submit_odometer_reading(
    reading: SubmitOdometerReading,
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    saved = today_route_service.submit_odometer_reading(db, current_user.id, reading.model_dump())
    return {
        "success": True,
        "message": f"{reading.reading_type.capitalize()} odometer reading submitted successfully",
        "data": saved,
    }


# fuel

@router.get("/fuel/efficiency")
def get_fuel_efficiency_report(
    bus_id: Optional[int] = Query(None, alias="busId"),
    limit: int = Query(50, ge=2, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    if bus_id is None:
        assignment = today_route_service.find_today_assignment(db, current_user.id)
        if not assignment:
            return {"success": True, "data": {"hasData": False, "message": "No active assignment found"}}
        bus_id = assignment.vehicle_id
    return {"success": True, "data": today_route_service.get_fuel_efficiency_report(db, bus_id, limit)}


@router.get("/fuel/summary", dependencies=[Depends(route_user)])
def get_fuel_cost_summary(
    bus_id: int = Query(..., alias="busId"),
    start_date: date = Query(..., alias="startDate"),
    end_date: date = Query(..., alias="endDate"),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": today_route_service.get_fuel_cost_summary(db, bus_id, start_date, end_date)}


@router.get("/fuel")
def get_fuel_entries(
    bus_id: Optional[int] = Query(None, alias="busId"),
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    if bus_id is None:
        assignment = today_route_service.find_today_assignment(db, current_user.id)
        if not assignment:
            return {"success": True, "data": []}
        bus_id = assignment.vehicle_id
    return {"success": True, "data": today_route_service.get_fuel_entries(db, bus_id, limit)}


@router.post("/fuel", status_code=201)
def submit_fuel_entry(
    entry: SubmitFuelEntry,
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    saved = today_route_service.submit_fuel_entry(db, current_user.id, entry.model_dump())
    return {"success": True, "message": "Fuel entry recorded successfully", "data": saved}


@router.get("/driver-fuel-history")
def get_driver_fuel_history(
    limit: int = Query(50, ge=1, le=500),
    db: Session = Depends(get_db),
    current_user: User = Depends(route_user)
):
    return {"success": True, "data": today_route_service.get_driver_fuel_entries(db, current_user.id, limit)}
