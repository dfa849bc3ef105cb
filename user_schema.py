from typing import Literal, Optional
from pydantic import BaseModel, EmailStr, Field

Role = Literal["admin", "accountant", "driver"]


class LoginUser(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)


class CreateUser(BaseModel):
    name: str = Field(min_length=2)
    address: Optional[str] = None
    mobile: Optional[str] = None
    role: Role
    nic: Optional[str] = None
    employe_number: Optional[str] = None
    email: EmailStr
    password: str = Field(min_length=6)
    is_active: bool = True


class UpdateUser(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    address: Optional[str] = None
    mobile: Optional[str] = None
    role: Optional[Role] = None
    nic: Optional[str] = None
    employe_number: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
    is_active: Optional[bool] = None


class CreateStaff(BaseModel):
    name: str = Field(min_length=2)
    address: Optional[str] = None
    mobile: Optional[str] = None
    role: str
    nic: Optional[str] = None
    employee_number: Optional[str] = None
    email: EmailStr
    password: str = Field(min_length=6)
    is_active: bool = True


class UpdateStaff(BaseModel):
    name: Optional[str] = Field(None, min_length=2)
    address: Optional[str] = None
    mobile: Optional[str] = None
    nic: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    is_active: Optional[bool] = None
