from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import require_roles
from database import get_db
from user_models import User
import fuel_efficiency_service

router = APIRouter(prefix="/fuel-efficiency", tags=["fuel efficiency"])

office_roles = require_roles("admin", "accountant")
report_roles = require_roles("admin", "accountant", "driver")


def _listing(data: list, range_name: str) -> dict:
    return {"success": True, "data": data, "range": range_name, "count": len(data)}


# buses

@router.get("/buses", dependencies=[Depends(office_roles)])
def get_bus_efficiency(range_name: str = Query("month", alias="range"), db: Session = Depends(get_db)):
    return _listing(fuel_efficiency_service.buses_efficiency(db, range_name), range_name)


@router.get("/buses/{bus_id}", dependencies=[Depends(office_roles)])
def get_bus_efficiency_by_id(bus_id: int, range_name: str = Query("month", alias="range"), db: Session = Depends(get_db)):
    data = fuel_efficiency_service.bus_efficiency(db, bus_id, range_name)
    return {"success": True, "data": data, "range": range_name}


@router.get("/bus/{bus_id}/full-report", dependencies=[Depends(office_roles)])
def get_bus_full_report(bus_id: int, range_name: str = Query("month", alias="range"), db: Session = Depends(get_db)):
    data = fuel_efficiency_service.bus_full_report(db, bus_id, range_name)
    return {"success": True, "data": data, "range": range_name}


# drivers

@router.get("/drivers", dependencies=[Depends(office_roles)])
def get_driver_efficiency(range_name: str = Query("month", alias="range"), db: Session = Depends(get_db)):
    return _listing(fuel_efficiency_service.drivers_efficiency(db, range_name), range_name)


@router.get("/drivers/{driver_id}")
def get_driver_efficiency_by_id(
    driver_id: int,
    range_name: str = Query("month", alias="range"),
    db: Session = Depends(get_db),
    current_user: User = Depends(report_roles)
):
    fuel_efficiency_service.ensure_driver_access(current_user, driver_id)
    data = fuel_efficiency_service.driver_efficiency(db, driver_id, range_name)
    return {"success": True, "data": data, "range": range_name}


@router.get("/driver/{driver_id}/full-report")
def get_driver_full_report(
    driver_id: int,
    range_name: str = Query("month", alias="range"),
    db: Session = Depends(get_db),
    current_user: User = Depends(report_roles)
):
    fuel_efficiency_service.ensure_driver_access(current_user, driver_id)
    data = fuel_efficiency_service.driver_full_report(db, driver_id, range_name)
    return {"success": True, "data": data, "range": range_name}


@router.get("/driver/{driver_id}/buses-operated")
def get_driver_buses_operated(
    driver_id: int,
    range_name: str = Query("month", alias="range"),
    db: Session = Depends(get_db),
    current_user: User = Depends(report_roles)
):
    fuel_efficiency_service.ensure_driver_access(current_user, driver_id)
    return _listing(fuel_efficiency_service.driver_buses(db, driver_id, range_name), range_name)


@router.get("/driver/{driver_id}/fuel-entries")
def get_driver_fuel_entries(
    driver_id: int,
    range_name: str = Query("month", alias="range"),
    db: Session = Depends(get_db),
    current_user: User = Depends(report_roles)
):
    fuel_efficiency_service.ensure_driver_access(current_user, driver_id)
    return _listing(fuel_efficiency_service.driver_fuel_entries(db, driver_id, range_name), range_name)


# leaderboard and alerts

@router.get("/leaderboard", dependencies=[Depends(report_roles)])
def get_leaderboard(
    range_name: str = Query("month", alias="range"),
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_db)
):
    return _listing(fuel_efficiency_service.leaderboard(db, limit, range_name), range_name)


@router.get("/alerts", dependencies=[Depends(office_roles)])
def get_efficiency_alerts(range_name: str = Query("week", alias="range"), db: Session = Depends(get_db)):
    return _listing(fuel_efficiency_service.efficiency_alerts(db, range_name), range_name)
