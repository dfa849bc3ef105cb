from datetime import date
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, model_validator


class CreateSparePart(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    part_name: str = Field(min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class UpdateSparePart(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    part_name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)


class InstallSparePart(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    spare_part_id: int = Field(gt=0)
    bus_id: int = Field(gt=0)
    install_odometer: float = Field(ge=0)
    install_date: date
    installed_by: int = Field(gt=0)
    cost: float = Field(ge=0)
    distance_limit: float = Field(gt=0)
    boundary_limit: float = Field(ge=0)
    brand: str = Field(min_length=1, max_length=255)
    is_active: bool = True

    @model_validator(mode="after")
    def boundary_below_limit(self):
        if self.boundary_limit >= self.distance_limit:
            raise ValueError("Boundary limit must be less than distance limit")
        return self


class ReplaceSparePart(BaseModel):
    """New part fitted in place of an old one; bus and catalog part are inherited."""
    model_config = ConfigDict(str_strip_whitespace=True)

    spare_part_id: Optional[int] = Field(None, gt=0)
    bus_id: Optional[int] = Field(None, gt=0)
    install_odometer: float = Field(ge=0)
    install_date: date
    installed_by: int = Field(gt=0)
    cost: float = Field(ge=0)
    distance_limit: float = Field(gt=0)
    boundary_limit: float = Field(ge=0)
    brand: str = Field(min_length=1, max_length=255)

    @model_validator(mode="after")
    def boundary_below_limit(self):
        if self.boundary_limit >= self.distance_limit:
            raise ValueError("Boundary limit must be less than distance limit")
        return self


class UpdateVehicleSparePart(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    is_active: Optional[bool] = None
    cost: Optional[float] = Field(None, ge=0)
    brand: Optional[str] = Field(None, min_length=1, max_length=255)
    distance_limit: Optional[float] = Field(None, gt=0)
    boundary_limit: Optional[float] = Field(None, ge=0)
