"""Сервис учетных записей сотрудников."""

from decimal import Decimal
from typing import Any, Dict, Iterable, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.logging.logger import logger
from core.utils.money import mask_bank_details, round_money, to_decimal
from domain.entities.employee import Employee, EmployeeStatus
from domain.entities.user import User
from shared.services.exceptions import EmployeeAlreadyExistsError, NotFoundError, ValidationError

MONEY_FIELDS = ("base_salary", "allowances")
UPDATABLE_FIELDS = frozenset({
    "department",
    "designation",
    "base_salary",
    "allowances",
    "pf_applicable",
    "professional_tax_applicable",
    "join_date",
    "bank_details",
    "status",
})


def _normalize(data: Dict[str, Any]) -> Dict[str, Any]:
    """Проверка денежных полей и маскирование реквизитов."""
    normalized = dict(data)
    for field in MONEY_FIELDS:
        if normalized.get(field) is not None:
            amount = to_decimal(normalized[field])
            if amount < Decimal("0"):
                raise ValidationError(f"{field} must not be negative", {"field": field})
            normalized[field] = round_money(amount)
    if normalized.get("bank_details"):
        normalized["bank_details"] = mask_bank_details(normalized["bank_details"])
    if normalized.get("status") is not None:
        normalized["status"] = EmployeeStatus(normalized["status"]).value
    return normalized


class EmployeeService:
    """Создание и изменение сотрудников. Удаления нет."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_employee(self, employee_id: int) -> Employee:
        query = (
            select(Employee)
            .options(selectinload(Employee.user))
            .where(Employee.id == employee_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        employee = result.scalar_one_or_none()
        if employee is None:
            raise NotFoundError("Employee", employee_id)
        return employee

    async def list_employees(self) -> List[Employee]:
        query = select(Employee).options(selectinload(Employee.user)).order_by(Employee.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_employees_by_ids(self, employee_ids: Iterable[int]) -> Dict[int, Employee]:
        ids = set(employee_ids)
        if not ids:
            return {}
        query = select(Employee).options(selectinload(Employee.user)).where(Employee.id.in_(ids))
        result = await self.session.execute(query)
        return {employee.id: employee for employee in result.scalars().all()}

    async def create_employee(self, user_id: int, data: Dict[str, Any]) -> Employee:
        """Создает сотрудника для существующего пользователя, не больше одного."""
        user = await self.session.get(User, user_id)
        if user is None:
            raise NotFoundError("User", user_id)

        existing = await self.session.execute(select(Employee.id).where(Employee.user_id == user_id))
        if existing.scalar_one_or_none() is not None:
            raise EmployeeAlreadyExistsError(user_id)

        payload = _normalize(data)
        payload.setdefault("allowances", Decimal("0.00"))
        employee = Employee(user_id=user_id, **payload)
        self.session.add(employee)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise ValidationError(
                "Employee code already exists", {"employee_code": payload.get("employee_code")}
            ) from e

        logger.info("Employee created", employee_id=employee.id, user_id=user_id)
        return await self.get_employee(employee.id)

    async def update_employee(self, employee_id: int, changes: Dict[str, Any]) -> Employee:
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError("Unknown employee fields", {"fields": sorted(unknown)})

        employee = await self.get_employee(employee_id)
        for field, value in _normalize(changes).items():
            setattr(employee, field, value)
        await self.session.commit()

        logger.info("Employee updated", employee_id=employee_id, fields=sorted(changes))
        return employee
