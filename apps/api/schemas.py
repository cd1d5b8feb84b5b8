"""
Схемы Pydantic для API HRMS
"""
from datetime import date, datetime
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_validator
from pydantic.alias_generators import to_camel

from core.utils.money import round_money
from domain.entities.attendance import AttendanceStatus
from domain.entities.employee import EmployeeStatus
from domain.entities.payrun import PayrunStatus
from domain.entities.time_off import TimeOffStatus, TimeOffType

# В JSON деньги уходят числами, а не строками
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class APIModel(BaseModel):
    """База всех схем: camelCase на проводе, чтение из ORM."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(APIModel):
    page: int
    limit: int
    total: int
    pages: int

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, pages=(total + limit - 1) // limit)


# --- Зарплата ---------------------------------------------------------------


class PayrollPeriodRequest(APIModel):
    """Период расчета, границы включительно."""
    period_start: date = Field(..., description="Начало периода")
    period_end: date = Field(..., description="Конец периода")

    @model_validator(mode="after")
    def validate_period(self):
        """Начало периода не позже конца."""
        if self.period_start > self.period_end:
            raise ValueError("periodStart must not be after periodEnd")
        return self


class PayrollLine(APIModel):
    """Строка черновика расчета."""
    employee_id: int
    employee_name: str = ""
    employee_code: str = ""
    department: Optional[str] = None
    designation: Optional[str] = None
    base_salary: Money = Field(Decimal("0"), ge=0)
    gross: Money = Field(..., ge=0)
    unpaid_deduction: Money = Field(Decimal("0"), ge=0)
    pf_employee: Money = Field(Decimal("0"), ge=0)
    professional_tax: Money = Field(Decimal("0"), ge=0)
    other_deductions: Money = Field(Decimal("0"), ge=0)
    net: Money
    working_days: int = Field(0, ge=0)
    unpaid_days: int = Field(0, ge=0)

    @field_validator(
        "base_salary", "gross", "unpaid_deduction", "pf_employee",
        "professional_tax", "other_deductions", "net",
    )
    @classmethod
    def round_amount(cls, v):
        return round_money(v)

    @model_validator(mode="after")
    def validate_net(self):
        """Чистая сумма равна начислению минус удержания."""
        deductions = self.unpaid_deduction + self.pf_employee + self.professional_tax + self.other_deductions
        if self.net != round_money(self.gross - deductions):
            raise ValueError(f"net must equal gross minus deductions for employee {self.employee_id}")
        return self


class PayrollLineOut(PayrollLine):
    total_deductions: Money


class PayrollSummarySchema(APIModel):
    total_employees: int
    total_gross: Money
    total_deductions: Money
    total_net: Money


class PayrollComputeResponse(APIModel):
    period_start: date
    period_end: date
    payroll_data: List[PayrollLineOut]
    summary: PayrollSummarySchema


class FinalizeRequest(PayrollPeriodRequest):
    """Если payrollData не передан, расчет выполняется заново."""
    payroll_data: Optional[List[PayrollLine]] = None

    @model_validator(mode="after")
    def validate_unique_employees(self):
        if self.payroll_data:
            ids = [line.employee_id for line in self.payroll_data]
            if len(ids) != len(set(ids)):
                raise ValueError("payrollData must contain one line per employee")
        return self


class EmployeeBrief(APIModel):
    id: int
    employee_code: str
    department: Optional[str] = None
    designation: Optional[str] = None
    name: str = Field(validation_alias="display_name")


class PayslipOut(APIModel):
    id: int
    payrun_line_id: int
    file_path: str
    generated_at: datetime


class PayrunOut(APIModel):
    id: int
    period_start: date
    period_end: date
    status: PayrunStatus
    total_gross: Money
    total_deductions: Money
    total_net: Money
    created_by: Optional[int] = None
    created_at: datetime


class PayrunLineBrief(APIModel):
    id: int
    payrun_id: int
    employee_id: int
    gross: Money
    unpaid_deduction: Money
    pf_employee: Money
    professional_tax: Money
    other_deductions: Money
    total_deductions: Money
    net: Money
    remarks: Optional[str] = None
    employee: Optional[EmployeeBrief] = None


class PayrunLineOut(PayrunLineBrief):
    payslip: Optional[PayslipOut] = None


class PayrunDetailOut(PayrunOut):
    lines: List[PayrunLineOut] = []


class PayrunListResponse(APIModel):
    payruns: List[PayrunDetailOut]
    pagination: Pagination


class NotificationSummary(APIModel):
    sent: int
    failed: int


class FinalizeResponse(APIModel):
    message: str
    payrun: PayrunOut
    payslips_generated: int
    summary: PayrollSummarySchema
    notifications: NotificationSummary


class PayslipGenerationResponse(APIModel):
    message: str
    payrun_id: int
    payslips_generated: int
    notifications: NotificationSummary


class MessageResponse(APIModel):
    message: str


# --- Расчетные листы --------------------------------------------------------


class PayslipLineOut(PayrunLineBrief):
    payrun: PayrunOut


class PayslipDetailOut(PayslipOut):
    payrun_line: PayslipLineOut


class PayslipListResponse(APIModel):
    payslips: List[PayslipDetailOut]
    pagination: Pagination


# --- Отпуска ----------------------------------------------------------------


class TimeOffCreate(APIModel):
    from_date: date
    to_date: date
    type: TimeOffType
    reason: str = Field(..., min_length=5, max_length=1000)


class TimeOffReject(APIModel):
    reason: Optional[str] = Field(None, max_length=1000)


class TimeOffOut(APIModel):
    id: int
    employee_id: int
    from_date: date
    to_date: date
    type: TimeOffType
    reason: Optional[str] = None
    status: TimeOffStatus
    approver_id: Optional[int] = None
    created_at: datetime


class TimeOffListResponse(APIModel):
    time_off_requests: List[TimeOffOut]
    pagination: Pagination


# --- Посещаемость -----------------------------------------------------------


class AbsentRequest(APIModel):
    employee_id: int
    date: date


class AttendanceOut(APIModel):
    id: int
    employee_id: int
    check_in: Optional[datetime] = None
    check_out: Optional[datetime] = None
    total_hours: Optional[Money] = None
    status: AttendanceStatus
    date: date


class TodayAttendanceResponse(APIModel):
    attendance: Optional[AttendanceOut] = None
    can_clock_in: bool
    can_clock_out: bool


class AttendanceListResponse(APIModel):
    attendance: List[AttendanceOut]
    pagination: Pagination


# --- Сотрудники -------------------------------------------------------------


class EmployeeCreate(APIModel):
    user_id: int
    employee_code: str = Field(..., min_length=1, max_length=50)
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    base_salary: Decimal = Field(..., ge=0)
    allowances: Decimal = Field(Decimal("0"), ge=0)
    pf_applicable: bool = True
    professional_tax_applicable: bool = True
    join_date: date
    bank_details: Optional[str] = Field(None, max_length=100)


class EmployeeUpdate(APIModel):
    department: Optional[str] = Field(None, max_length=100)
    designation: Optional[str] = Field(None, max_length=100)
    base_salary: Optional[Decimal] = Field(None, ge=0)
    allowances: Optional[Decimal] = Field(None, ge=0)
    pf_applicable: Optional[bool] = None
    professional_tax_applicable: Optional[bool] = None
    join_date: Optional[date] = None
    bank_details: Optional[str] = Field(None, max_length=100)
    status: Optional[EmployeeStatus] = None


class EmployeeOut(APIModel):
    id: int
    user_id: int
    name: str = Field(validation_alias="display_name")
    employee_code: str
    department: Optional[str] = None
    designation: Optional[str] = None
    base_salary: Money
    allowances: Money
    pf_applicable: bool
    professional_tax_applicable: bool
    join_date: date
    bank_details: Optional[str] = None
    status: EmployeeStatus
    created_at: datetime
