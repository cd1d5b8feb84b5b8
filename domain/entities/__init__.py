"""
Модуль доменных сущностей HRMS
"""

# Импортируем модели в правильном порядке
from .base import Base
from .user import User
from .employee import Employee, EmployeeStatus
from .time_off import TimeOff, TimeOffType, TimeOffStatus
from .attendance import Attendance, AttendanceStatus
from .payrun import Payrun, PayrunLine, PayrunStatus
from .payslip import Payslip

__all__ = [
    "Base",
    "User",
    "Employee",
    "EmployeeStatus",
    "TimeOff",
    "TimeOffType",
    "TimeOffStatus",
    "Attendance",
    "AttendanceStatus",
    "Payrun",
    "PayrunLine",
    "PayrunStatus",
    "Payslip",
]
