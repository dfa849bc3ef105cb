from datetime import datetime, date
from typing import Optional
from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _coerce_datetime(value):
    """Accept ISO datetimes, bare dates and 'YYYY-MM-DD HH:MM'; store naive server-local time."""
    if value in (None, ""):
        return None
    if isinstance(value, str):
        value = value.strip()
        if len(value) == 10:
            value = date.fromisoformat(value)
        else:
            value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if isinstance(value, date) and not isinstance(value, datetime):
        value = datetime(value.year, value.month, value.day)
    if isinstance(value, datetime) and value.tzinfo is not None:
        # active and covering checks run on the local clock
        value = value.astimezone().replace(tzinfo=None)
    return value


class CreateAssignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_id: int = Field(gt=0, validation_alias=AliasChoices("vehicle_id", "vehicleId"))
    employee_id: int = Field(gt=0, validation_alias=AliasChoices("employee_id", "employeeId"))
    start_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("end_date", "endDate"))
    route: Optional[str] = Field(None, min_length=1, max_length=120)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value):
        return _coerce_datetime(value)


class PatchAssignment(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    vehicle_id: Optional[int] = Field(None, gt=0, validation_alias=AliasChoices("vehicle_id", "vehicleId"))
    employee_id: Optional[int] = Field(None, gt=0, validation_alias=AliasChoices("employee_id", "employeeId"))
    start_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("start_date", "startDate"))
    end_date: Optional[datetime] = Field(None, validation_alias=AliasChoices("end_date", "endDate"))
    route: Optional[str] = Field(None, min_length=1, max_length=120)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, value):
        return _coerce_datetime(value)
