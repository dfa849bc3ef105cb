from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from fitness_schema import Level


class CamelModel(BaseModel):
    # the driver app posts camelCase bodies
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SubmitFitnessCheck(CamelModel):
    assignment_id: Optional[int] = Field(None, gt=0)
    bus_id: Optional[int] = Field(None, gt=0)
    oil_level: Level
    oil_checked: bool
    water_level: Level
    water_checked: bool
    notes: Optional[str] = Field(None, max_length=500)
    check_date: Optional[date] = None


class SubmitOdometerReading(CamelModel):
    assignment_id: Optional[int] = Field(None, gt=0)
    bus_id: Optional[int] = Field(None, gt=0)
    reading_type: Literal["morning", "evening"]
    reading_km: float = Field(gt=0)
    reading_date: Optional[date] = None


class SubmitFuelEntry(CamelModel):
    assignment_id: Optional[int] = Field(None, gt=0)
    bus_id: Optional[int] = Field(None, gt=0)
    odometer_at_fueling: float = Field(gt=0)
    liters_filled: float = Field(gt=0)
    price_per_liter: float = Field(gt=0)
    total_cost: Optional[float] = Field(None, gt=0)
    fuel_station: str = Field(min_length=1, max_length=255)
    notes: Optional[str] = Field(None, max_length=500)
    fuel_date: Optional[date] = None
