"""
Зависимости FastAPI: текущий пользователь, права, внешние сервисы
"""
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from core.auth.permissions import Permission
from core.auth.tokens import Actor, verify_access_token
from shared.services.exceptions import PermissionDeniedError, ValidationError
from shared.services.notification_fanout import PayslipNotifier
from shared.services.payslip_renderer import PayslipRenderer, ReportlabPayslipRenderer
from shared.services.senders.email_sender import get_email_sender

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    """Пользователь из Bearer токена."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    actor = verify_access_token(credentials.credentials)
    if actor is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return actor


def require_permission(permission: Permission):
    """Зависимость, пропускающая только роли с нужным правом."""

    async def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if not actor.can(permission):
            raise PermissionDeniedError(
                "Insufficient permissions",
                {"role": actor.role.value, "required": permission.value},
            )
        return actor

    return checker


def require_employee_id(actor: Actor) -> int:
    """ID сотрудника текущего пользователя."""
    if actor.employee_id is None:
        raise ValidationError("Employee record not found")
    return actor.employee_id


def get_payslip_renderer() -> PayslipRenderer:
    return ReportlabPayslipRenderer()


def get_payslip_notifier() -> PayslipNotifier:
    return get_email_sender()
