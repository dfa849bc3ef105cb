from typing import Optional
from pydantic import BaseModel, Field


class CreateBus(BaseModel):
    no_plate: str = Field(min_length=3)
    brand: Optional[str] = None
    model: Optional[str] = None
    number_of_seats: Optional[int] = Field(None, gt=0)
    fuel_type: Optional[str] = None
    fuel_tank_capacity: Optional[float] = None
    wheel_count: Optional[int] = None
    engine_cc: Optional[int] = None
    year_of_manufacture: Optional[int] = None
    is_active: bool = True


class UpdateBus(BaseModel):
    no_plate: Optional[str] = Field(None, min_length=3)
    brand: Optional[str] = None
    model: Optional[str] = None
    number_of_seats: Optional[int] = Field(None, gt=0)
    fuel_type: Optional[str] = None
    fuel_tank_capacity: Optional[float] = None
    wheel_count: Optional[int] = None
    engine_cc: Optional[int] = None
    year_of_manufacture: Optional[int] = None
    is_active: Optional[bool] = None
