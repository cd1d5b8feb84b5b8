"""
API роутер посещаемости
"""
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_current_actor, require_employee_id, require_permission
from apps.api.schemas import (
    AbsentRequest,
    AttendanceListResponse,
    AttendanceOut,
    Pagination,
    TodayAttendanceResponse,
)
from core.auth.permissions import Permission
from core.auth.tokens import Actor
from core.database.session import get_db_session
from shared.services.attendance_service import AttendanceService
from shared.services.employee_service import EmployeeService

router = APIRouter(prefix="/attendance", tags=["attendance"])


@router.get("/today", response_model=TodayAttendanceResponse)
async def get_today_attendance(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Сегодняшняя отметка. Без записи сотрудника отметиться можно всегда."""
    if actor.employee_id is None:
        return TodayAttendanceResponse(attendance=None, can_clock_in=True, can_clock_out=False)

    today = await AttendanceService(db).get_today(actor.employee_id)
    return TodayAttendanceResponse(
        attendance=AttendanceOut.model_validate(today.attendance) if today.attendance else None,
        can_clock_in=today.can_clock_in,
        can_clock_out=today.can_clock_out,
    )


@router.post("/clock-in", response_model=AttendanceOut)
async def clock_in(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    record = await AttendanceService(db).clock_in(require_employee_id(actor))
    return AttendanceOut.model_validate(record)


@router.post("/clock-out", response_model=AttendanceOut)
async def clock_out(
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    record = await AttendanceService(db).clock_out(require_employee_id(actor))
    return AttendanceOut.model_validate(record)


@router.post("/absent", response_model=AttendanceOut)
async def mark_absent(
    request: AbsentRequest,
    actor: Actor = Depends(require_permission(Permission.ATTENDANCE_VIEW_ALL)),
    db: AsyncSession = Depends(get_db_session),
):
    """Отметка прогула. Учитывается в неоплачиваемых днях."""
    await EmployeeService(db).get_employee(request.employee_id)
    record = await AttendanceService(db).mark_absent(request.employee_id, request.date)
    return AttendanceOut.model_validate(record)


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    employee_id: Optional[int] = Query(None, alias="employeeId", description="Фильтр по сотруднику"),
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=100, description="Размер страницы"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Отметки посещаемости. Без права просмотра всех видны только свои."""
    if not actor.can(Permission.ATTENDANCE_VIEW_ALL):
        employee_id = require_employee_id(actor)

    records, total = await AttendanceService(db).list_attendance(
        employee_id=employee_id,
        date_from=date_from,
        date_to=date_to,
        page=page,
        limit=limit,
    )
    return AttendanceListResponse(
        attendance=[AttendanceOut.model_validate(record) for record in records],
        pagination=Pagination.build(page, limit, total),
    )
