from sqlalchemy import (
    Column, Integer, String, Float, Date, DateTime, Text, ForeignKey,
    UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from database import Base
from bus_models import Bus
from user_models import User

READING_TYPES = ("morning", "evening")


class OdometerReading(Base):
    __tablename__ = "odometer_reading"
    __table_args__ = (
        UniqueConstraint(
            "assignment_id", "reading_type", "reading_date",
            name="odometer_reading_assignment_type_date_key",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(
        Integer,
        ForeignKey("vehicle_driver_assignment.vehicle_driver_assignmentid", ondelete="CASCADE"),
        nullable=False,
    )
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    reading_type = Column(String(10), nullable=False)
    reading_km = Column(Float, nullable=False)
    reading_date = Column(Date, nullable=False, index=True)
    submitted_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class FuelEntry(Base):
    __tablename__ = "fuel_entries"

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(
        Integer,
        ForeignKey("vehicle_driver_assignment.vehicle_driver_assignmentid", ondelete="SET NULL"),
        nullable=True,
    )
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    odometer_at_fueling = Column(Float, nullable=False)
    liters_filled = Column(Float, nullable=False)
    price_per_liter = Column(Float, nullable=False)
    total_cost = Column(Float, nullable=False)
    fuel_station = Column(String(255), nullable=False)
    notes = Column(Text, default="")
    fuel_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, server_default=func.now())

    bus = relationship(Bus)
    driver = relationship(User)
