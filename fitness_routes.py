from datetime import date
from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import get_current_user, require_roles
from database import get_db
from fitness_schema import CreateFitnessCheck, UpdateFitnessCheck
from user_models import User
import fitness_service

router = APIRouter(prefix="/bus-fitness", tags=["bus fitness"], dependencies=[Depends(get_current_user)])

office_roles = require_roles("admin", "accountant")


@router.get("", dependencies=[Depends(office_roles)])
def get_all_fitness_records(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=200),
    sort_by: str = Query("check_date", alias="sortBy"),
    order: Literal["ASC", "DESC", "asc", "desc"] = Query("DESC"),
    db: Session = Depends(get_db)
):
    result = fitness_service.list_records(db, page=page, limit=limit, sort_by=sort_by, order=order)
    return {"success": True, "data": result["records"], "pagination": result["pagination"]}


@router.get("/date/{check_date}")
def get_fitness_records_by_date(check_date: date, db: Session = Depends(get_db)):
    return {"success": True, "data": fitness_service.records_by_date(db, check_date), "date": check_date}


@router.get("/bus/{bus_id}")
def get_fitness_records_by_bus(
    bus_id: int,
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    records = fitness_service.records_by_bus(db, bus_id, start_date=start_date, end_date=end_date)
    return {"success": True, "data": records, "busId": bus_id}


@router.get("/bus/{bus_id}/history")
def get_bus_history(bus_id: int, limit: int = Query(50, ge=1, le=500), db: Session = Depends(get_db)):
    return {"success": True, "data": fitness_service.bus_history(db, bus_id, limit=limit), "busId": bus_id}


@router.get("/status/{check_date}")
def get_bus_check_status(check_date: date, db: Session = Depends(get_db)):
    return {"success": True, "data": fitness_service.check_status(db, check_date), "date": check_date}


@router.get("/today-assignments")
def get_today_assignments(check_date: Optional[date] = Query(None, alias="date"), db: Session = Depends(get_db)):
    result = fitness_service.assignments_with_status(db, check_date)
    return {"success": True, "data": result["assignments"], "date": result["date"]}


@router.get("/stats/summary", dependencies=[Depends(office_roles)])
def get_fitness_summary(
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    db: Session = Depends(get_db)
):
    return {"success": True, "data": fitness_service.summary(db, start_date=start_date, end_date=end_date)}


@router.get("/{record_id}")
def get_fitness_record(record_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": fitness_service.get_record(db, record_id)}


@router.post("", status_code=201)
def create_fitness_record(
    check: CreateFitnessCheck,
    db: Session = Depends(get_db),
    current_user: User = Depends(require_roles("driver"))
):
    record = fitness_service.create_record(db, check.model_dump(), driver_id=current_user.id)
    return {"success": True, "message": "Fitness check submitted successfully", "data": record}


@router.put("/{record_id}")
def update_fitness_record(
    record_id: int,
    check: UpdateFitnessCheck,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    record = fitness_service.update_record(db, record_id, check.model_dump(exclude_unset=True), current_user)
    return {"success": True, "message": "Fitness record updated successfully", "data": record}


@router.delete("/{record_id}", dependencies=[Depends(require_roles("admin"))])
def delete_fitness_record(record_id: int, db: Session = Depends(get_db)):
    fitness_service.delete_record(db, record_id)
    return {"success": True, "message": "Fitness record deleted successfully"}
