"""Shared services package."""

from .payroll_service import PayrollService, PayrollLineDraft, PayrollSummary, compute_line, summarize
from .payrun_service import PayrunService
from .payslip_service import PayslipService
from .unpaid_days_service import UnpaidDaysService
from .working_day_calculator import working_days

__all__ = [
    'PayrollService',
    'PayrollLineDraft',
    'PayrollSummary',
    'compute_line',
    'summarize',
    'PayrunService',
    'PayslipService',
    'UnpaidDaysService',
    'working_days',
]
