from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, func
from sqlalchemy.orm import relationship
from database import Base
from bus_models import Bus
from user_models import User


class VehicleDriverAssignment(Base):
    __tablename__ = "vehicle_driver_assignment"

    id = Column("vehicle_driver_assignmentid", Integer, primary_key=True, index=True)
    vehicle_id = Column(Integer, ForeignKey("bus.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(DateTime, nullable=False, server_default=func.now())
    # NULL means the assignment is open-ended
    end_date = Column(DateTime, nullable=True)
    route = Column(String(120))
    created_at = Column(DateTime, server_default=func.now())
    update_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    bus = relationship(Bus)
    driver = relationship(User)
