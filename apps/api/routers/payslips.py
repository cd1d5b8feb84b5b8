"""
API роутер расчетных листов
"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import FileResponse
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_current_actor, get_payslip_renderer, require_permission
from apps.api.schemas import Pagination, PayslipDetailOut, PayslipListResponse
from core.auth.permissions import Permission
from core.auth.tokens import Actor
from core.database.session import get_db_session
from domain.entities.payslip import Payslip
from shared.services.exceptions import PermissionDeniedError
from shared.services.payslip_renderer import PayslipRenderer
from shared.services.payslip_service import PayslipService

router = APIRouter(prefix="/payslips", tags=["payslips"])


def _ensure_can_view(actor: Actor, payslip: Payslip) -> None:
    """Свой лист видит любой сотрудник, чужие только с правом просмотра всех."""
    if actor.can(Permission.PAYSLIP_VIEW_ALL):
        return
    if actor.employee_id is None or payslip.payrun_line.employee_id != actor.employee_id:
        raise PermissionDeniedError("Access denied", {"payslip_id": payslip.id})


@router.get("", response_model=PayslipListResponse)
async def list_payslips(
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=100, description="Размер страницы"),
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """Список листов. Сотрудник без права просмотра видит только свои."""
    service = PayslipService(db)
    if actor.can(Permission.PAYSLIP_VIEW_ALL):
        payslips, total = await service.list_payslips(page=page, limit=limit)
    elif actor.employee_id is not None:
        payslips, total = await service.list_payslips(page=page, limit=limit, employee_id=actor.employee_id)
    else:
        payslips, total = [], 0

    return PayslipListResponse(
        payslips=[PayslipDetailOut.model_validate(payslip) for payslip in payslips],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{payslip_id}", response_model=PayslipDetailOut)
async def get_payslip(
    payslip_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    payslip = await PayslipService(db).get_payslip(payslip_id)
    _ensure_can_view(actor, payslip)
    return PayslipDetailOut.model_validate(payslip)


@router.get("/{payslip_id}/download")
async def download_payslip(
    payslip_id: int,
    actor: Actor = Depends(get_current_actor),
    db: AsyncSession = Depends(get_db_session),
):
    """PDF файл листа."""
    service = PayslipService(db)
    payslip = await service.get_payslip(payslip_id)
    _ensure_can_view(actor, payslip)

    file_path = service.resolve_download_path(payslip)
    return FileResponse(path=file_path, media_type="application/pdf", filename=file_path.name)


@router.post("/{payslip_id}/regenerate", response_model=PayslipDetailOut)
async def regenerate_payslip(
    payslip_id: int,
    actor: Actor = Depends(require_permission(Permission.PAYSLIP_REGENERATE)),
    db: AsyncSession = Depends(get_db_session),
    renderer: PayslipRenderer = Depends(get_payslip_renderer),
):
    """Перегенерация PDF листа."""
    payslip = await PayslipService(db, renderer=renderer).regenerate_payslip(payslip_id)
    return PayslipDetailOut.model_validate(payslip)
