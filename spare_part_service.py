import logging
from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from bus_service import get_bus_or_404
from database import row_to_dict
from efficiency import spare_part_distance
from spare_part_models import SparePart, VehicleSparePart, MaintenanceLog
from trip_models import OdometerReading

logger = logging.getLogger(__name__)


def _name_taken(db: Session, part_name: str, exclude_id: int = None) -> bool:
    query = db.query(SparePart).filter(func.lower(SparePart.part_name) == part_name.lower())
    if exclude_id is not None:
        query = query.filter(SparePart.id != exclude_id)
    return db.query(query.exists()).scalar()


def installation_dict(part: VehicleSparePart) -> dict:
    data = row_to_dict(part)
    data["part_name"] = part.spare_part.part_name if part.spare_part else None
    data["part_description"] = part.spare_part.description if part.spare_part else None
    data["no_plate"] = part.bus.no_plate if part.bus else None
    data["bus_brand"] = part.bus.brand if part.bus else None
    data["bus_model"] = part.bus.model if part.bus else None
    data["installer_name"] = part.installer.name if part.installer else None
    return data


def _installations(db: Session):
    return db.query(VehicleSparePart).options(
        joinedload(VehicleSparePart.spare_part),
        joinedload(VehicleSparePart.bus),
        joinedload(VehicleSparePart.installer),
    )


def current_odometers(db: Session) -> dict:
    """Highest recorded reading per bus."""
    rows = (
        db.query(OdometerReading.bus_id, func.max(OdometerReading.reading_km))
        .group_by(OdometerReading.bus_id)
        .all()
    )
    return dict(rows)


def _with_distance(part: VehicleSparePart, odometers: dict) -> dict:
    data = installation_dict(part)
    data.update(spare_part_distance(
        part.distance_limit,
        part.boundary_limit,
        part.install_odometer,
        odometers.get(part.bus_id),
    ))
    return data


# catalog

def list_spare_parts(db: Session) -> list:
    return [row_to_dict(p) for p in db.query(SparePart).order_by(SparePart.part_name.asc()).all()]


def get_spare_part_or_404(db: Session, part_id: int) -> SparePart:
    part = db.get(SparePart, part_id)
    if not part:
        raise HTTPException(status_code=404, detail="Spare part not found")
    return part


def get_spare_part(db: Session, part_id: int) -> dict:
    return row_to_dict(get_spare_part_or_404(db, part_id))


def create_spare_part(db: Session, data: dict) -> dict:
    if _name_taken(db, data["part_name"]):
        raise HTTPException(status_code=409, detail="A spare part with this name already exists")
    part = SparePart(part_name=data["part_name"], description=data.get("description") or None)
    db.add(part)
    db.commit()
    db.refresh(part)
    logger.info("added spare part %s (%s)", part.id, part.part_name)
    return row_to_dict(part)


def update_spare_part(db: Session, part_id: int, patch: dict) -> dict:
    part = get_spare_part_or_404(db, part_id)
    name = patch.get("part_name")
    if name and name != part.part_name and _name_taken(db, name, exclude_id=part_id):
        raise HTTPException(status_code=409, detail="A spare part with this name already exists")
    for key, value in patch.items():
        if value is not None:
            setattr(part, key, value)
    db.commit()
    db.refresh(part)
    return row_to_dict(part)


def delete_spare_part(db: Session, part_id: int) -> dict:
    part = get_spare_part_or_404(db, part_id)
    db.delete(part)
    db.commit()
    logger.info("deleted spare part %s", part_id)
    return {"message": "Spare part deleted successfully"}


# installations

def list_installations(db: Session, bus_id: int = None, is_active: bool = None, spare_part_id: int = None) -> list:
    query = _installations(db)
    if bus_id:
        query = query.filter(VehicleSparePart.bus_id == bus_id)
    if is_active is not None:
        query = query.filter(VehicleSparePart.is_active.is_(is_active))
    if spare_part_id:
        query = query.filter(VehicleSparePart.spare_part_id == spare_part_id)
    parts = query.order_by(
        VehicleSparePart.install_date.desc(),
        VehicleSparePart.created_at.desc(),
        VehicleSparePart.id.desc(),
    ).all()
    return [installation_dict(p) for p in parts]


def get_installation_or_404(db: Session, installation_id: int,
                            detail: str = "Vehicle spare part installation not found") -> VehicleSparePart:
    part = _installations(db).filter(VehicleSparePart.id == installation_id).first()
    if not part:
        raise HTTPException(status_code=404, detail=detail)
    return part


def get_installation(db: Session, installation_id: int) -> dict:
    return installation_dict(get_installation_or_404(db, installation_id))


def _add_installation(db: Session, data: dict) -> VehicleSparePart:
    """Stage a new installation and its maintenance log; the caller commits."""
    get_bus_or_404(db, data["bus_id"])
    get_spare_part_or_404(db, data["spare_part_id"])

    part = VehicleSparePart(
        spare_part_id=data["spare_part_id"],
        bus_id=data["bus_id"],
        install_odometer=data["install_odometer"],
        install_date=data["install_date"],
        installed_by=data["installed_by"],
        cost=data["cost"],
        distance_limit=data["distance_limit"],
        boundary_limit=data["boundary_limit"],
        brand=data["brand"],
        is_active=data.get("is_active", True),
    )
    db.add(part)
    db.flush()
    db.add(MaintenanceLog(
        vehicle_spare_part_id=part.id,
        bus_id=part.bus_id,
        odometer_at_service=part.install_odometer,
        action_taken=f"Installed new {part.brand} spare part",
        performed_by=part.installed_by,
    ))
    return part


def install_spare_part(db: Session, data: dict) -> dict:
    part = _add_installation(db, data)
    db.commit()
    logger.info("installed spare part %s on bus %s", part.spare_part_id, part.bus_id)
    return get_installation(db, part.id)


def update_installation(db: Session, installation_id: int, patch: dict) -> dict:
    part = get_installation_or_404(db, installation_id)
    patch = {key: value for key, value in patch.items() if value is not None}

    distance_limit = patch.get("distance_limit", part.distance_limit)
    boundary_limit = patch.get("boundary_limit", part.boundary_limit)
    if boundary_limit >= distance_limit:
        raise HTTPException(status_code=400, detail="Boundary limit must be less than distance limit")

    was_active = part.is_active
    for key, value in patch.items():
        setattr(part, key, value)
    if was_active and patch.get("is_active") is False:
        db.add(MaintenanceLog(
            vehicle_spare_part_id=part.id,
            bus_id=part.bus_id,
            odometer_at_service=part.install_odometer,
            action_taken="Spare part replaced/deactivated",
            performed_by=None,
        ))
        logger.info("spare part installation %s deactivated", part.id)
    db.commit()
    return get_installation(db, installation_id)


def delete_installation(db: Session, installation_id: int) -> dict:
    part = get_installation_or_404(db, installation_id)
    db.delete(part)
    db.commit()
    logger.info("deleted spare part installation %s", installation_id)
    return {"message": "Vehicle spare part installation deleted successfully"}


def replace_spare_part(db: Session, installation_id: int, data: dict) -> dict:
    """Retire an active installation and fit a new part of the same kind on the same bus."""
    old = get_installation_or_404(db, installation_id, detail="Original spare part installation not found")
    if not old.is_active:
        raise HTTPException(status_code=400, detail="This spare part has already been replaced")

    old.is_active = False
    db.add(MaintenanceLog(
        vehicle_spare_part_id=old.id,
        bus_id=old.bus_id,
        odometer_at_service=data["install_odometer"],
        action_taken=f"Replaced {old.brand} spare part with new {data['brand']}",
        performed_by=data["installed_by"],
    ))
    new = _add_installation(db, dict(data, spare_part_id=old.spare_part_id, bus_id=old.bus_id, is_active=True))
    db.commit()
    logger.info("replaced spare part installation %s with %s on bus %s", old.id, new.id, new.bus_id)
    return {
        "oldPart": get_installation(db, old.id),
        "newPart": get_installation(db, new.id),
    }


# alerts and status

def replacement_alerts(db: Session) -> list:
    odometers = current_odometers(db)
    parts = _installations(db).filter(VehicleSparePart.is_active.is_(True)).all()
    alerts = [_with_distance(p, odometers) for p in parts]
    alerts = [a for a in alerts if a["distance_remaining"] <= a["boundary_limit"]]
    return sorted(alerts, key=lambda a: a["distance_remaining"])


def bus_status(db: Session, bus_id: int) -> list:
    odometers = current_odometers(db)
    parts = (
        _installations(db)
        .filter(VehicleSparePart.bus_id == bus_id, VehicleSparePart.is_active.is_(True))
        .all()
    )
    return sorted((_with_distance(p, odometers) for p in parts), key=lambda s: s["distance_remaining"])


# maintenance logs and odometer

def maintenance_logs(db: Session, bus_id: int = None) -> list:
    query = db.query(MaintenanceLog).options(
        joinedload(MaintenanceLog.bus), joinedload(MaintenanceLog.performer)
    )
    if bus_id:
        query = query.filter(MaintenanceLog.bus_id == bus_id)
    logs = []
    for log in query.order_by(MaintenanceLog.created_at.desc(), MaintenanceLog.id.desc()).all():
        data = row_to_dict(log)
        data["no_plate"] = log.bus.no_plate if log.bus else None
        data["performed_by_name"] = log.performer.name if log.performer else None
        logs.append(data)
    return logs


def latest_odometer(db: Session, bus_id: int) -> dict:
    reading = (
        db.query(OdometerReading)
        .filter(OdometerReading.bus_id == bus_id)
        .order_by(OdometerReading.reading_date.desc(), OdometerReading.submitted_at.desc(), OdometerReading.id.desc())
        .first()
    )
    if not reading:
        return {"reading_km": 0, "message": "No odometer reading found"}
    return {
        "reading_km": reading.reading_km,
        "reading_date": reading.reading_date,
        "reading_type": reading.reading_type,
    }
