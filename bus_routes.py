from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from auth import get_current_user, require_roles
from database import get_db
from bus_schema import CreateBus, UpdateBus
import bus_service

router = APIRouter(prefix="/bus", tags=["bus"])


@router.get("", dependencies=[Depends(require_roles("admin", "accountant"))])
def list_buses(db: Session = Depends(get_db)):
    return bus_service.list_buses(db)


@router.get("/{bus_id}", dependencies=[Depends(get_current_user)])
def get_bus(bus_id: int, db: Session = Depends(get_db)):
    return bus_service.get_bus(db, bus_id)


@router.post("", status_code=201, dependencies=[Depends(require_roles("admin"))])
def create_bus(bus: CreateBus, db: Session = Depends(get_db)):
    return bus_service.add_bus(db, bus.model_dump())


@router.put("/{bus_id}", dependencies=[Depends(require_roles("admin"))])
def update_bus(bus_id: int, bus: UpdateBus, db: Session = Depends(get_db)):
    return bus_service.modify_bus(db, bus_id, bus.model_dump(exclude_unset=True))


@router.delete("/{bus_id}", dependencies=[Depends(require_roles("admin"))])
def delete_bus(bus_id: int, db: Session = Depends(get_db)):
    return bus_service.remove_bus(db, bus_id)
