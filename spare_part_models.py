from sqlalchemy import (
    Column, Integer, String, Float, Boolean, Date, DateTime, Text, ForeignKey, func,
)
from sqlalchemy.orm import relationship
from database import Base
from bus_models import Bus
from user_models import User


class SparePart(Base):
    __tablename__ = "spare_part"

    id = Column(Integer, primary_key=True, index=True)
    part_name = Column(String(255), unique=True, nullable=False)
    description = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class VehicleSparePart(Base):
    __tablename__ = "vehicle_spare_part"

    id = Column(Integer, primary_key=True, index=True)
    spare_part_id = Column(Integer, ForeignKey("spare_part.id", ondelete="CASCADE"), nullable=False)
    bus_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    install_odometer = Column(Float, nullable=False)
    install_date = Column(Date, nullable=False)
    installed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    cost = Column(Float, nullable=False, default=0)
    distance_limit = Column(Float, nullable=False)
    boundary_limit = Column(Float, nullable=False)
    brand = Column(String(255), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    spare_part = relationship(SparePart)
    bus = relationship(Bus)
    installer = relationship(User)


class MaintenanceLog(Base):
    __tablename__ = "maintenance_log"

    id = Column(Integer, primary_key=True, index=True)
    vehicle_spare_part_id = Column(
        Integer, ForeignKey("vehicle_spare_part.id", ondelete="CASCADE")
    )
    bus_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    odometer_at_service = Column(Float)
    action_taken = Column(String(255), nullable=False)
    performed_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"))
    created_at = Column(DateTime, server_default=func.now())

    bus = relationship(Bus)
    performer = relationship(User)
