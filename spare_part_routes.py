from typing import Literal, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from auth import get_current_user, require_roles
from database import get_db
from spare_part_schema import (
    CreateSparePart, UpdateSparePart, InstallSparePart, ReplaceSparePart, UpdateVehicleSparePart,
)
import spare_part_service

router = APIRouter(prefix="/spare-part", tags=["spare parts"], dependencies=[Depends(get_current_user)])

admin_only = [Depends(require_roles("admin"))]


# installations; static paths stay above /{part_id}

@router.get("/vehicle/all")
def get_all_vehicle_spare_parts(
    bus_id: Optional[int] = Query(None, gt=0),
    is_active: Optional[Literal["true", "false"]] = Query(None),
    spare_part_id: Optional[int] = Query(None, gt=0),
    db: Session = Depends(get_db)
):
    return spare_part_service.list_installations(
        db,
        bus_id=bus_id,
        is_active=None if is_active is None else is_active == "true",
        spare_part_id=spare_part_id,
    )


@router.get("/vehicle/alerts/replacement")
def get_replacement_alerts(db: Session = Depends(get_db)):
    return spare_part_service.replacement_alerts(db)


@router.get("/vehicle/bus/{bus_id}/status")
def get_bus_spare_part_status(bus_id: int, db: Session = Depends(get_db)):
    return spare_part_service.bus_status(db, bus_id)


@router.get("/vehicle/{installation_id}")
def get_vehicle_spare_part(installation_id: int, db: Session = Depends(get_db)):
    return spare_part_service.get_installation(db, installation_id)


@router.post("/vehicle", status_code=201, dependencies=admin_only)
def install_spare_part(installation: InstallSparePart, db: Session = Depends(get_db)):
    return spare_part_service.install_spare_part(db, installation.model_dump())


@router.put("/vehicle/{installation_id}", dependencies=admin_only)
def update_vehicle_spare_part(
    installation_id: int, installation: UpdateVehicleSparePart, db: Session = Depends(get_db)
):
    return spare_part_service.update_installation(db, installation_id, installation.model_dump(exclude_unset=True))


@router.delete("/vehicle/{installation_id}", dependencies=admin_only)
def delete_vehicle_spare_part(installation_id: int, db: Session = Depends(get_db)):
    return spare_part_service.delete_installation(db, installation_id)


@router.post("/vehicle/{installation_id}/replace", status_code=201, dependencies=admin_only)
def replace_spare_part(installation_id: int, replacement: ReplaceSparePart, db: Session = Depends(get_db)):
    return spare_part_service.replace_spare_part(db, installation_id, replacement.model_dump())


# maintenance logs and odometer

@router.get("/maintenance-logs")
def get_maintenance_logs(bus_id: Optional[int] = Query(None, gt=0), db: Session = Depends(get_db)):
    return spare_part_service.maintenance_logs(db, bus_id=bus_id)


@router.get("/odometer/bus/{bus_id}/latest")
def get_latest_odometer(bus_id: int, db: Session = Depends(get_db)):
    return spare_part_service.latest_odometer(db, bus_id)


# catalog

@router.get("")
def get_all_spare_parts(db: Session = Depends(get_db)):
    return spare_part_service.list_spare_parts(db)


@router.get("/{part_id}")
def get_spare_part(part_id: int, db: Session = Depends(get_db)):
    return spare_part_service.get_spare_part(db, part_id)


@router.post("", status_code=201, dependencies=admin_only)
def create_spare_part(part: CreateSparePart, db: Session = Depends(get_db)):
    return spare_part_service.create_spare_part(db, part.model_dump())


@router.put("/{part_id}", dependencies=admin_only)
def update_spare_part(part_id: int, part: UpdateSparePart, db: Session = Depends(get_db)):
    return spare_part_service.update_spare_part(db, part_id, part.model_dump(exclude_unset=True))


@router.delete("/{part_id}", dependencies=admin_only)
def delete_spare_part(part_id: int, db: Session = Depends(get_db)):
    return spare_part_service.delete_spare_part(db, part_id)
