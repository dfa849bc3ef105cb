from sqlalchemy import Column, Integer, String, Float, Boolean, DateTime, func
from database import Base


class Bus(Base):
    __tablename__ = "bus"

    id = Column(Integer, primary_key=True, index=True)
    no_plate = Column(String(50), unique=True, index=True, nullable=False)
    brand = Column(String(100))
    model = Column(String(100))
    number_of_seats = Column(Integer)
    fuel_type = Column(String(50))
    fuel_tank_capacity = Column(Float)
    wheel_count = Column(Integer)
    engine_cc = Column(Integer)
    year_of_manufacture = Column(Integer)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, server_default=func.now())

    @property
    def model_full(self):
        """'brand model' the way fleet reports print it."""
        full = " ".join(part for part in (self.brand, self.model) if part)
        return full or "N/A"
