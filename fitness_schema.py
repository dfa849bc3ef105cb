from datetime import date
from typing import Literal, Optional
from pydantic import BaseModel, Field

Level = Literal["full", "adequate", "low", "critical"]


class CreateFitnessCheck(BaseModel):
    assignment_id: int = Field(gt=0)
    bus_id: int = Field(gt=0)
    oil_level: Level = "full"
    oil_checked: bool = True
    water_level: Level = "full"
    water_checked: bool = True
    notes: Optional[str] = Field(None, max_length=500)
    check_date: Optional[date] = None


class UpdateFitnessCheck(BaseModel):
    oil_level: Optional[Level] = None
    oil_checked: Optional[bool] = None
    water_level: Optional[Level] = None
    water_checked: Optional[bool] = None
    notes: Optional[str] = Field(None, max_length=500)
