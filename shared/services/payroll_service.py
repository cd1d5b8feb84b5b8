"""Сервис расчета и фиксации зарплатных ведомостей."""

from dataclasses import dataclass, asdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.config.settings import settings
from core.logging.logger import logger
from core.utils.money import ZERO, Number, round_money, to_decimal
from domain.entities.employee import Employee, EmployeeStatus
from domain.entities.payrun import Payrun, PayrunLine, PayrunStatus
from shared.services.exceptions import PayrunAlreadyExistsError, ValidationError
from shared.services.unpaid_days_service import UnpaidDaysService
from shared.services.working_day_calculator import working_days


@dataclass
class PayrollLineDraft:
    """Черновая строка расчета по сотруднику. Ничего не сохраняет."""

    employee_id: int
    employee_name: str
    employee_code: str
    department: Optional[str]
    designation: Optional[str]
    base_salary: Decimal
    gross: Decimal
    unpaid_deduction: Decimal
    pf_employee: Decimal
    professional_tax: Decimal
    other_deductions: Decimal
    net: Decimal
    working_days: int
    unpaid_days: int

    @property
    def total_deductions(self) -> Decimal:
        return self.unpaid_deduction + self.pf_employee + self.professional_tax + self.other_deductions

    @property
    def remarks(self) -> str:
        return f"Working Days: {self.working_days}, Unpaid Days: {self.unpaid_days}"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["total_deductions"] = self.total_deductions
        return data


@dataclass
class PayrollSummary:
    total_employees: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal


def compute_line(
    employee: Employee,
    period_start: date,
    period_end: date,
    unpaid_days: int,
    pf_rate: Optional[Number] = None,
    professional_tax: Optional[Number] = None,
) -> PayrollLineDraft:
    """
    Расчет строки по одному сотруднику.

    Знаменатель дневной ставки всегда общий для периода. Для пришедших в
    середине периода рабочие дни пересчитываются от даты приема, но это
    число только справочное и в удержание не идет.
    """
    pf_rate = to_decimal(settings.payroll_pf_rate if pf_rate is None else pf_rate)
    professional_tax = to_decimal(
        settings.payroll_professional_tax if professional_tax is None else professional_tax
    )

    period_working_days = working_days(period_start, period_end)
    if employee.join_date > period_start:
        actual_working_days = working_days(employee.join_date, period_end)
    else:
        actual_working_days = period_working_days

    base_salary = to_decimal(employee.base_salary)
    allowances = to_decimal(employee.allowances or 0)

    gross = round_money(base_salary + allowances)
    unpaid_deduction = round_money(base_salary / Decimal(period_working_days) * unpaid_days)
    pf_employee = round_money(base_salary * pf_rate) if employee.pf_applicable else ZERO
    pt_amount = round_money(professional_tax) if employee.professional_tax_applicable else ZERO
    other_deductions = ZERO  # Займы/авансы пока не учитываются

    net = round_money(gross - (unpaid_deduction + pf_employee + pt_amount + other_deductions))

    return PayrollLineDraft(
        employee_id=employee.id,
        employee_name=employee.display_name,
        employee_code=employee.employee_code,
        department=employee.department,
        designation=employee.designation,
        base_salary=round_money(base_salary),
        gross=gross,
        unpaid_deduction=unpaid_deduction,
        pf_employee=pf_employee,
        professional_tax=pt_amount,
        other_deductions=other_deductions,
        net=net,
        working_days=actual_working_days,
        unpaid_days=unpaid_days,
    )


def summarize(lines: Sequence[PayrollLineDraft]) -> PayrollSummary:
    """Итоги по набору строк, округленные до копеек."""
    return PayrollSummary(
        total_employees=len(lines),
        total_gross=round_money(sum((line.gross for line in lines), ZERO)),
        total_deductions=round_money(sum((line.total_deductions for line in lines), ZERO)),
        total_net=round_money(sum((line.net for line in lines), ZERO)),
    )


def validate_period(period_start: date, period_end: date) -> None:
    if period_start > period_end:
        raise ValidationError(
            "Period start must not be after period end",
            {"period_start": period_start.isoformat(), "period_end": period_end.isoformat()},
        )


class PayrollService:
    """Расчет черновика и фиксация ведомости за период."""

    def __init__(self, session: AsyncSession, unpaid_days_service: Optional[UnpaidDaysService] = None):
        self.session = session
        self.unpaid_days_service = unpaid_days_service or UnpaidDaysService(session)

    async def get_eligible_employees(self, period_end: date) -> List[Employee]:
        """Активные сотрудники, принятые не позже конца периода."""
        query = (
            select(Employee)
            .options(selectinload(Employee.user))
            .where(
                Employee.join_date <= period_end,
                Employee.status == EmployeeStatus.ACTIVE.value,
            )
            .order_by(Employee.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def compute_payroll(self, period_start: date, period_end: date) -> List[PayrollLineDraft]:
        """Черновой расчет по всем подходящим сотрудникам. Без записи в БД."""
        validate_period(period_start, period_end)

        employees = await self.get_eligible_employees(period_end)
        logger.info(
            "Computing payroll",
            period_start=period_start.isoformat(),
            period_end=period_end.isoformat(),
            employees=len(employees),
        )

        lines: List[PayrollLineDraft] = []
        for employee in employees:
            unpaid = await self.unpaid_days_service.unpaid_days(employee.id, period_start, period_end)
            line = compute_line(employee, period_start, period_end, unpaid)
            logger.debug(
                "Payroll line computed",
                employee_id=employee.id,
                gross=str(line.gross),
                net=str(line.net),
                unpaid_days=unpaid,
            )
            lines.append(line)

        return lines

    async def get_payrun_for_period(self, period_start: date, period_end: date) -> Optional[Payrun]:
        query = select(Payrun).where(
            Payrun.period_start == period_start,
            Payrun.period_end == period_end,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def finalize_payroll(
        self,
        period_start: date,
        period_end: date,
        lines: Sequence[PayrollLineDraft],
        created_by: Optional[int],
    ) -> Tuple[Payrun, List[PayrunLine]]:
        """
        Фиксирует ведомость и все ее строки одной транзакцией.

        Вторая ведомость за тот же период отклоняется: проверкой заранее и
        уникальным ограничением на случай параллельного вызова.
        """
        validate_period(period_start, period_end)

        if await self.get_payrun_for_period(period_start, period_end) is not None:
            raise PayrunAlreadyExistsError(period_start, period_end)

        employee_ids = {line.employee_id for line in lines}
        if len(employee_ids) != len(lines):
            raise ValidationError("Payroll data must contain one line per employee")
        if employee_ids:
            result = await self.session.execute(select(Employee.id).where(Employee.id.in_(employee_ids)))
            unknown = employee_ids - set(result.scalars().all())
            if unknown:
                raise ValidationError("Unknown employees in payroll data", {"employee_ids": sorted(unknown)})

        summary = summarize(lines)
        payrun = Payrun(
            period_start=period_start,
            period_end=period_end,
            status=PayrunStatus.FINALIZED.value,
            created_by=created_by,
            total_gross=summary.total_gross,
            total_deductions=summary.total_deductions,
            total_net=summary.total_net,
        )
        payrun_lines = [
            PayrunLine(
                employee_id=line.employee_id,
                gross=line.gross,
                unpaid_deduction=line.unpaid_deduction,
                pf_employee=line.pf_employee,
                professional_tax=line.professional_tax,
                other_deductions=line.other_deductions,
                net=line.net,
                remarks=line.remarks,
            )
            for line in lines
        ]
        payrun.lines = payrun_lines

        try:
            self.session.add(payrun)
            await self.session.flush()
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            logger.warning(
                "Payrun finalization rejected by constraint",
                period_start=period_start.isoformat(),
                period_end=period_end.isoformat(),
                error=str(e.orig),
            )
            if await self.get_payrun_for_period(period_start, period_end) is not None:
                raise PayrunAlreadyExistsError(period_start, period_end) from e
            raise ValidationError("Payroll data references unknown records") from e
        except Exception:
            await self.session.rollback()
            raise

        logger.info(
            "Payrun finalized",
            payrun_id=payrun.id,
            lines=len(payrun_lines),
            total_gross=str(payrun.total_gross),
            total_deductions=str(payrun.total_deductions),
            total_net=str(payrun.total_net),
            created_by=created_by,
        )
        return payrun, payrun_lines
