"""
API роутер сотрудников
"""
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import require_permission
from apps.api.schemas import EmployeeCreate, EmployeeOut, EmployeeUpdate
from core.auth.permissions import Permission
from core.auth.tokens import Actor
from core.database.session import get_db_session
from shared.services.employee_service import EmployeeService

router = APIRouter(prefix="/employees", tags=["employees"])

employee_manager = require_permission(Permission.EMPLOYEE_MANAGE)


@router.post("", response_model=EmployeeOut, status_code=status.HTTP_201_CREATED)
async def create_employee(
    request: EmployeeCreate,
    actor: Actor = Depends(employee_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Создание сотрудника для существующего пользователя."""
    data = request.model_dump(exclude={"user_id"})
    employee = await EmployeeService(db).create_employee(request.user_id, data)
    return EmployeeOut.model_validate(employee)


@router.get("", response_model=List[EmployeeOut])
async def list_employees(
    actor: Actor = Depends(employee_manager),
    db: AsyncSession = Depends(get_db_session),
):
    employees = await EmployeeService(db).list_employees()
    return [EmployeeOut.model_validate(employee) for employee in employees]


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee(
    employee_id: int,
    actor: Actor = Depends(employee_manager),
    db: AsyncSession = Depends(get_db_session),
):
    employee = await EmployeeService(db).get_employee(employee_id)
    return EmployeeOut.model_validate(employee)


@router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee(
    employee_id: int,
    request: EmployeeUpdate,
    actor: Actor = Depends(employee_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Частичное обновление. Переданные null поля игнорируются."""
    changes = request.model_dump(exclude_none=True)
    employee = await EmployeeService(db).update_employee(employee_id, changes)
    return EmployeeOut.model_validate(employee)
