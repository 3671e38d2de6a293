from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from app.schemas.envelope import Envelope


class EmployeeInput(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    first_name: str
    last_name: str
    email: str
    gender: str
    designation: str
    salary: float
    date_of_joining: date
    department: str
    employee_photo: Optional[str] = None  # URL or inline image data


class EmployeeUpdateInput(BaseModel):
    model_config = ConfigDict(allow_inf_nan=False)

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    gender: Optional[str] = None
    designation: Optional[str] = None
    salary: Optional[float] = None
    date_of_joining: Optional[date] = None
    department: Optional[str] = None
    employee_photo: Optional[str] = None


class EmployeeOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: str
    gender: str
    designation: str
    salary: float
    date_of_joining: date
    department: str
    employee_photo: Optional[str] = None
    created_at: Optional[datetime] = None


class EmployeeResponse(Envelope):
    employee: Optional[EmployeeOut] = None


class EmployeeListResponse(Envelope):
    employees: List[EmployeeOut]

    @classmethod
    def failure(cls, message: str) -> "EmployeeListResponse":
        return cls(success=False, message=message, employees=[])
