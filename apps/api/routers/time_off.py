"""
API роутер заявок на отпуск
"""
from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_current_actor, require_employee_id, require_permission
from apps.api.schemas import Pagination, TimeOffCreate, TimeOffListResponse, TimeOffOut, TimeOffReject
from core.auth.permissions import Permission
from core.auth.tokens import Actor
from core.database.session import get_db_session
from domain.entities.time_off import TimeOffStatus
from shared.services.time_off_service import TimeOffService

router = APIRouter(prefix="/time-off", tags=["time-off"])

approver = require_permission(Permission.TIMEOFF_APPROVE)


@router.post("", response_model=TimeOffOut, status_code=status.HTTP_201_CREATED)
async def create_time_off(
    request: TimeOffCreate,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Заявка на отпуск от имени текущего сотрудника."""
    employee_id = require_employee_id(actor)
    time_off = await TimeOffService(db).create_request(
        employee_id=employee_id,
        from_date=request.from_date,
        to_date=request.to_date,
        leave_type=request.type.value,
        reason=request.reason,
    )
    return TimeOffOut.model_validate(time_off)


@router.get("", response_model=TimeOffListResponse)
async def list_time_off(
    status_filter: Optional[TimeOffStatus] = Query(None, alias="status", description="Фильтр по статусу"),
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=100, description="Размер страницы"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Заявки. Без права согласования видны только свои."""
    if actor.can(Permission.TIMEOFF_APPROVE):
        employee_id = None
    else:
        employee_id = require_employee_id(actor)

    requests, total = await TimeOffService(db).list_requests(
        status=status_filter.value if status_filter else None,
        employee_id=employee_id,
        page=page,
        limit=limit,
    )
    return TimeOffListResponse(
        time_off_requests=[TimeOffOut.model_validate(item) for item in requests],
        pagination=Pagination.build(page, limit, total),
    )


@router.post("/{time_off_id}/approve", response_model=TimeOffOut)
async def approve_time_off(
    time_off_id: int,
    actor: Actor = Depends(approver),
    db: AsyncSession = Depends(get_db_session),
):
    time_off = await TimeOffService(db).approve(time_off_id, approver_id=actor.user_id)
    return TimeOffOut.model_validate(time_off)


@router.post("/{time_off_id}/reject", response_model=TimeOffOut)
async def reject_time_off(
    time_off_id: int,
    request: Optional[TimeOffReject] = Body(None),
    actor: Actor = Depends(approver),
    db: AsyncSession = Depends(get_db_session),
):
    reason = request.reason if request else None
    time_off = await TimeOffService(db).reject(time_off_id, approver_id=actor.user_id, reason=reason)
    return TimeOffOut.model_validate(time_off)
