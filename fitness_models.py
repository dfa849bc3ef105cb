from sqlalchemy import (
    Column, Integer, String, Boolean, Date, DateTime, Text, ForeignKey,
    UniqueConstraint, func,
)
from sqlalchemy.orm import relationship
from database import Base
from bus_models import Bus
from user_models import User
from driver_assignment import VehicleDriverAssignment

LEVELS = ("full", "adequate", "low", "critical")


class BusFitness(Base):
    __tablename__ = "bus_fitness"
    __table_args__ = (
        UniqueConstraint("assignment_id", "check_date", name="bus_fitness_assignment_date_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    assignment_id = Column(
        Integer,
        ForeignKey("vehicle_driver_assignment.vehicle_driver_assignmentid", ondelete="CASCADE"),
        nullable=False,
    )
    driver_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    bus_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    oil_level = Column(String(20), nullable=False, default="full")
    oil_checked = Column(Boolean, nullable=False, default=True)
    water_level = Column(String(20), nullable=False, default="full")
    water_checked = Column(Boolean, nullable=False, default=True)
    notes = Column(Text, default="")
    check_date = Column(Date, nullable=False, index=True)
    submitted_at = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    assignment = relationship(VehicleDriverAssignment)
    driver = relationship(User)
    bus = relationship(Bus)
