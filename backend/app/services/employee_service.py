"""
Employee management operations.

Every operation runs the same pipeline: check the caller identity, validate
the input, touch the store, and build the result envelope. Any failure along
the way becomes a failure envelope through ``operation_boundary``.
"""

import logging
import math
from typing import Any, Dict, Mapping, Optional

from app.core.config import settings
from app.core.errors import DuplicateKey, OperationError, operation_boundary
from app.core.security import CallerIdentity
from app.core.validators import is_email, require_fields
from app.models.employee import Employee
from app.schemas.employee import (
    EmployeeInput,
    EmployeeListResponse,
    EmployeeOut,
    EmployeeResponse,
    EmployeeUpdateInput,
)
from app.services.employee_store import EmployeeStore
from app.services.media_service import PhotoResolver

logger = logging.getLogger(__name__)

REQUIRED_EMPLOYEE_FIELDS = [
    "first_name",
    "last_name",
    "email",
    "gender",
    "designation",
    "salary",
    "date_of_joining",
    "department",
]

EMPLOYEE_NOT_FOUND = "Employee not found"
DUPLICATE_EMPLOYEE_EMAIL = "Employee email already exists"


def _require_caller(caller: Optional[CallerIdentity]) -> CallerIdentity:
    if caller is None:
        raise OperationError.unauthorized()
    return caller


def _check_salary(salary: Optional[float]) -> None:
    # NaN compares false against the floor
    if salary is not None and not (math.isfinite(salary) and salary >= settings.MIN_EMPLOYEE_SALARY):
        raise OperationError.validation(f"Salary must be >= {settings.MIN_EMPLOYEE_SALARY:g}")


def _employee_out(employee: Employee) -> EmployeeOut:
    return EmployeeOut.model_validate(employee)


class EmployeeService:
    def __init__(self, employees: EmployeeStore, photos: PhotoResolver):
        self.employees = employees
        self.photos = photos

    @operation_boundary(EmployeeListResponse)
    async def list_employees(self, caller: Optional[CallerIdentity]) -> EmployeeListResponse:
        _require_caller(caller)
        employees = await self.employees.list_all()
        return EmployeeListResponse(
            success=True,
            message="Employees fetched",
            employees=[_employee_out(e) for e in employees],
        )

    @operation_boundary(EmployeeResponse)
    async def find_employee(self, caller: Optional[CallerIdentity], eid: Optional[str]) -> EmployeeResponse:
        _require_caller(caller)
        if not eid:
            raise OperationError.validation("Missing required field: eid")

        employee = await self.employees.get(eid)
        if employee is None:
            raise OperationError.not_found(EMPLOYEE_NOT_FOUND)
        return EmployeeResponse(success=True, message="Employee found", employee=_employee_out(employee))

    @operation_boundary(EmployeeListResponse)
    async def search_employees(
        self,
        caller: Optional[CallerIdentity],
        designation: Optional[str] = None,
        department: Optional[str] = None,
    ) -> EmployeeListResponse:
        _require_caller(caller)
        if not designation and not department:
            raise OperationError.validation("Provide designation or department")

        employees = await self.employees.search(designation=designation or None, department=department or None)
        return EmployeeListResponse(
            success=True,
            message="Employees fetched",
            employees=[_employee_out(e) for e in employees],
        )

    @operation_boundary(EmployeeResponse)
    async def create_employee(
        self, caller: Optional[CallerIdentity], data: Optional[Mapping[str, Any]]
    ) -> EmployeeResponse:
        _require_caller(caller)
        data = data or {}
        missing = require_fields(data, REQUIRED_EMPLOYEE_FIELDS)
        if missing:
            raise OperationError.validation(missing)

        employee_input = EmployeeInput.model_validate(data)
        if not is_email(employee_input.email):
            raise OperationError.validation("Invalid email format")
        _check_salary(employee_input.salary)

        fields = employee_input.model_dump()
        fields["employee_photo"] = await self.photos.resolve(employee_input.employee_photo)

        created = await self.employees.create(fields)
        if isinstance(created, DuplicateKey):
            raise OperationError.conflict(DUPLICATE_EMPLOYEE_EMAIL)

        logger.info(f"Employee {created.id} created by {caller.username}")
        return EmployeeResponse(success=True, message="Employee created", employee=_employee_out(created))

    @operation_boundary(EmployeeResponse)
    async def update_employee(
        self,
        caller: Optional[CallerIdentity],
        eid: Optional[str],
        data: Optional[Mapping[str, Any]],
    ) -> EmployeeResponse:
        """Apply only the fields present in the input; everything else is left as stored."""
        _require_caller(caller)
        employee = await self.employees.get(eid) if eid else None
        if employee is None:
            raise OperationError.not_found(EMPLOYEE_NOT_FOUND)

        update_input = EmployeeUpdateInput.model_validate(data or {})
        supplied = update_input.model_dump(exclude_none=True)

        if "email" in supplied and not is_email(supplied["email"]):
            raise OperationError.validation("Invalid email format")
        _check_salary(supplied.get("salary"))

        changes: Dict[str, Any] = {
            name: supplied[name] for name in Employee.UPDATABLE_FIELDS if name in supplied
        }
        if "date_of_joining" in supplied:
            changes["date_of_joining"] = supplied["date_of_joining"]
        if supplied.get("employee_photo"):
            changes["employee_photo"] = await self.photos.resolve(supplied["employee_photo"])

        updated = await self.employees.update(employee, changes)
        if isinstance(updated, DuplicateKey):
            raise OperationError.conflict(DUPLICATE_EMPLOYEE_EMAIL)

        logger.info(f"Employee {updated.id} updated by {caller.username}: {sorted(changes)}")
        return EmployeeResponse(success=True, message="Employee updated", employee=_employee_out(updated))

    @operation_boundary(EmployeeResponse)
    async def delete_employee(self, caller: Optional[CallerIdentity], eid: Optional[str]) -> EmployeeResponse:
        _require_caller(caller)
        if not eid:
            raise OperationError.validation("Missing required field: eid")

        deleted = await self.employees.delete(eid)
        if deleted is None:
            raise OperationError.not_found(EMPLOYEE_NOT_FOUND)

        logger.info(f"Employee {eid} deleted by {caller.username}")
        return EmployeeResponse(success=True, message="Employee deleted", employee=_employee_out(deleted))
