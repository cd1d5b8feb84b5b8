"""Роли и права доступа HRMS."""

from enum import Enum
from typing import Dict, FrozenSet


class Role(str, Enum):
    """Роли пользователей."""
    ADMIN = "ADMIN"
    HR = "HR"
    PAYROLL = "PAYROLL"
    EMPLOYEE = "EMPLOYEE"


class Permission(str, Enum):
    """Права, которые проверяются на границе API."""
    PAYROLL_MANAGE = "payroll:manage"
    PAYSLIP_VIEW_ALL = "payslip:view_all"
    PAYSLIP_REGENERATE = "payslip:regenerate"
    TIMEOFF_APPROVE = "timeoff:approve"
    EMPLOYEE_MANAGE = "employee:manage"
    ATTENDANCE_VIEW_ALL = "attendance:view_all"


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Permission]] = {
    Role.ADMIN: frozenset(Permission),
    Role.PAYROLL: frozenset({
        Permission.PAYROLL_MANAGE,
        Permission.PAYSLIP_VIEW_ALL,
        Permission.PAYSLIP_REGENERATE,
        Permission.ATTENDANCE_VIEW_ALL,
    }),
    Role.HR: frozenset({
        Permission.TIMEOFF_APPROVE,
        Permission.EMPLOYEE_MANAGE,
        Permission.ATTENDANCE_VIEW_ALL,
    }),
    Role.EMPLOYEE: frozenset(),
}


def has_permission(role: Role, permission: Permission) -> bool:
    """Проверка наличия права у роли."""
    return permission in ROLE_PERMISSIONS.get(role, frozenset())
