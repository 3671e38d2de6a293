"""
Employee store: persistence of employee records.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Union

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateKey
from app.models.employee import Employee

logger = logging.getLogger(__name__)


class EmployeeStore(ABC):
    """
    Storage operations the employee pipeline depends on.

    ``create`` and ``update`` are single atomic writes that report a unique
    email collision as ``DuplicateKey`` instead of raising.
    """

    @abstractmethod
    async def list_all(self) -> List[Employee]:
        """All employees, newest first."""

    @abstractmethod
    async def get(self, employee_id: str) -> Optional[Employee]:
        ...

    @abstractmethod
    async def search(self, designation: Optional[str] = None, department: Optional[str] = None) -> List[Employee]:
        """Employees matching every supplied filter."""

    @abstractmethod
    async def create(self, fields: Dict[str, Any]) -> Union[Employee, DuplicateKey]:
        ...

    @abstractmethod
    async def update(self, employee: Employee, changes: Dict[str, Any]) -> Union[Employee, DuplicateKey]:
        ...

    @abstractmethod
    async def delete(self, employee_id: str) -> Optional[Employee]:
        """Remove and return the employee, or None if it did not exist."""


class SqlEmployeeStore(EmployeeStore):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[Employee]:
        result = await self.db.execute(select(Employee).order_by(desc(Employee.created_at)))
        return list(result.scalars().all())

    async def get(self, employee_id: str) -> Optional[Employee]:
        if not employee_id:
            return None
        return await self.db.get(Employee, employee_id)

    async def search(self, designation: Optional[str] = None, department: Optional[str] = None) -> List[Employee]:
        query = select(Employee)
        if designation:
            query = query.where(Employee.designation == designation)
        if department:
            query = query.where(Employee.department == department)
        result = await self.db.execute(query.order_by(desc(Employee.created_at)))
        return list(result.scalars().all())

    async def create(self, fields: Dict[str, Any]) -> Union[Employee, DuplicateKey]:
        employee = Employee(**fields)
        self.db.add(employee)
        return await self._commit(employee)

    async def update(self, employee: Employee, changes: Dict[str, Any]) -> Union[Employee, DuplicateKey]:
        for name, value in changes.items():
            setattr(employee, name, value)
        return await self._commit(employee)

    async def delete(self, employee_id: str) -> Optional[Employee]:
        employee = await self.get(employee_id)
        if employee is None:
            return None
        await self.db.delete(employee)
        await self.db.commit()
        return employee

    async def _commit(self, employee: Employee) -> Union[Employee, DuplicateKey]:
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info(f"Duplicate employee email rejected: {e.orig}")
            return DuplicateKey(field="email")
        await self.db.refresh(employee)
        return employee
