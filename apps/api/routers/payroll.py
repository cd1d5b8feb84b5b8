"""
API роутер расчета и фиксации зарплатных ведомостей
"""
from dataclasses import asdict
from typing import Optional, Sequence

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from apps.api.dependencies import get_payslip_notifier, get_payslip_renderer, require_permission
from apps.api.schemas import (
    FinalizeRequest,
    FinalizeResponse,
    MessageResponse,
    NotificationSummary,
    Pagination,
    PayrollComputeResponse,
    PayrollLineOut,
    PayrollPeriodRequest,
    PayrollSummarySchema,
    PayrunDetailOut,
    PayrunListResponse,
    PayrunOut,
    PayslipGenerationResponse,
)
from core.auth.permissions import Permission
from core.auth.tokens import Actor
from core.database.session import get_db_session
from core.logging.logger import logger
from domain.entities.payrun import PayrunLine, PayrunStatus
from domain.entities.payslip import Payslip
from shared.services.employee_service import EmployeeService
from shared.services.notification_fanout import PayslipNotifier, fan_out
from shared.services.payroll_service import PayrollLineDraft, PayrollService, summarize
from shared.services.payrun_service import PayrunService
from shared.services.payslip_renderer import PayslipRenderer
from shared.services.payslip_service import PayslipService

router = APIRouter(prefix="/payroll", tags=["payroll"])

payroll_manager = require_permission(Permission.PAYROLL_MANAGE)


async def _notify_employees(
    db: AsyncSession,
    notifier: PayslipNotifier,
    payrun_lines: Sequence[PayrunLine],
    payslips: Sequence[Payslip],
) -> NotificationSummary:
    """Уведомления не влияют на результат фиксации."""
    employees = await EmployeeService(db).get_employees_by_ids(line.employee_id for line in payrun_lines)
    line_employee = {line.id: line.employee_id for line in payrun_lines}
    deliveries = [
        (employees[line_employee[payslip.payrun_line_id]], payslip.id)
        for payslip in payslips
        if line_employee.get(payslip.payrun_line_id) in employees
    ]
    outcomes = await fan_out(notifier, deliveries)
    sent = sum(1 for outcome in outcomes if outcome.delivered)
    return NotificationSummary(sent=sent, failed=len(outcomes) - sent)


@router.post("/compute", response_model=PayrollComputeResponse)
async def compute_payroll(
    request: PayrollPeriodRequest,
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Предварительный расчет за период. Ничего не сохраняет."""
    lines = await PayrollService(db).compute_payroll(request.period_start, request.period_end)
    summary = summarize(lines)
    return PayrollComputeResponse(
        period_start=request.period_start,
        period_end=request.period_end,
        payroll_data=[PayrollLineOut.model_validate(line.to_dict()) for line in lines],
        summary=PayrollSummarySchema.model_validate(asdict(summary)),
    )


@router.post("/finalize", response_model=FinalizeResponse)
async def finalize_payroll(
    request: FinalizeRequest,
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
    renderer: PayslipRenderer = Depends(get_payslip_renderer),
    notifier: PayslipNotifier = Depends(get_payslip_notifier),
):
    """Фиксация ведомости, генерация листов и рассылка уведомлений."""
    payroll_service = PayrollService(db)

    if request.payroll_data is None:
        lines = await payroll_service.compute_payroll(request.period_start, request.period_end)
    else:
        lines = [PayrollLineDraft(**line.model_dump()) for line in request.payroll_data]

    payrun, payrun_lines = await payroll_service.finalize_payroll(
        request.period_start, request.period_end, lines, created_by=actor.user_id
    )
    payslips = await PayslipService(db, renderer=renderer).generate_payslips_for_payrun(payrun.id)
    notifications = await _notify_employees(db, notifier, payrun_lines, payslips)

    logger.info(
        "Payroll finalize completed",
        payrun_id=payrun.id,
        payslips=len(payslips),
        notifications_sent=notifications.sent,
        notifications_failed=notifications.failed,
    )
    return FinalizeResponse(
        message="Payroll finalized and payslips generated successfully",
        payrun=PayrunOut.model_validate(payrun),
        payslips_generated=len(payslips),
        summary=PayrollSummarySchema.model_validate(asdict(summarize(lines))),
        notifications=notifications,
    )


@router.post("/{payrun_id}/payslips", response_model=PayslipGenerationResponse)
async def generate_missing_payslips(
    payrun_id: int,
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
    renderer: PayslipRenderer = Depends(get_payslip_renderer),
    notifier: PayslipNotifier = Depends(get_payslip_notifier),
):
    """Догенерация листов для строк ведомости, оставшихся без них."""
    payrun = await PayrunService(db).get_payrun(payrun_id)
    payslips = await PayslipService(db, renderer=renderer).generate_payslips_for_payrun(payrun.id)
    notifications = await _notify_employees(db, notifier, payrun.lines, payslips)

    logger.info("Missing payslips generated", payrun_id=payrun.id, payslips=len(payslips))
    return PayslipGenerationResponse(
        message="Payslips generated successfully",
        payrun_id=payrun.id,
        payslips_generated=len(payslips),
        notifications=notifications,
    )


@router.get("", response_model=PayrunListResponse)
async def list_payruns(
    page: int = Query(1, ge=1, description="Номер страницы"),
    limit: int = Query(10, ge=1, le=100, description="Размер страницы"),
    status: Optional[PayrunStatus] = Query(None, description="Фильтр по статусу"),
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Список ведомостей, новые первыми."""
    payruns, total = await PayrunService(db).list_payruns(
        page=page, limit=limit, status=status.value if status else None
    )
    return PayrunListResponse(
        payruns=[PayrunDetailOut.model_validate(payrun) for payrun in payruns],
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{payrun_id}", response_model=PayrunDetailOut)
async def get_payrun(
    payrun_id: int,
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Ведомость со строками и листами."""
    payrun = await PayrunService(db).get_payrun(payrun_id)
    return PayrunDetailOut.model_validate(payrun)


@router.delete("/{payrun_id}", response_model=MessageResponse)
async def delete_payrun(
    payrun_id: int,
    actor: Actor = Depends(payroll_manager),
    db: AsyncSession = Depends(get_db_session),
):
    """Удаление ведомости. Зафиксированные не удаляются."""
    await PayrunService(db).delete_payrun(payrun_id)
    return MessageResponse(message="Payrun deleted successfully")
