import logging
from fastapi import HTTPException
from sqlalchemy.orm import Session

from bus_models import Bus
from database import row_to_dict

logger = logging.getLogger(__name__)


def get_bus_or_404(db: Session, bus_id: int, detail: str = "Bus not found") -> Bus:
    bus = db.get(Bus, bus_id)
    if not bus:
        raise HTTPException(status_code=404, detail=detail)
    return bus


def _plate_taken(db: Session, no_plate: str, exclude_id: int = None) -> bool:
    query = db.query(Bus).filter(Bus.no_plate == no_plate)
    if exclude_id is not None:
        query = query.filter(Bus.id != exclude_id)
    return db.query(query.exists()).scalar()


def list_buses(db: Session) -> list:
    return [row_to_dict(b) for b in db.query(Bus).order_by(Bus.id).all()]


def get_bus(db: Session, bus_id: int) -> dict:
    return row_to_dict(get_bus_or_404(db, bus_id))


def add_bus(db: Session, data: dict) -> dict:
    if _plate_taken(db, data["no_plate"]):
        raise HTTPException(status_code=409, detail="A bus with this number plate already exists")
    bus = Bus(**data)
    db.add(bus)
    db.commit()
    db.refresh(bus)
    logger.info("registered bus %s (%s)", bus.id, bus.no_plate)
    return row_to_dict(bus)


def modify_bus(db: Session, bus_id: int, patch: dict) -> dict:
    bus = get_bus_or_404(db, bus_id)
    patch = {key: value for key, value in patch.items() if value is not None}
    if patch.get("no_plate") and _plate_taken(db, patch["no_plate"], exclude_id=bus_id):
        raise HTTPException(status_code=409, detail="A bus with this number plate already exists")
    for key, value in patch.items():
        setattr(bus, key, value)
    db.commit()
    db.refresh(bus)
    return row_to_dict(bus)


def remove_bus(db: Session, bus_id: int) -> dict:
    bus = get_bus_or_404(db, bus_id)
    db.delete(bus)
    db.commit()
    logger.info("deleted bus %s", bus_id)
    return {"message": "Bus deleted successfully"}
