"""
JWT токены доступа.

Выдача токенов живет во внешнем сервисе авторизации, здесь только проверка
и вспомогательное создание токена для скриптов и тестов.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt

from core.auth.permissions import Permission, Role, has_permission
from core.config.settings import settings
from core.logging.logger import logger


@dataclass(frozen=True)
class Actor:
    """Аутентифицированный пользователь запроса."""
    user_id: int
    role: Role
    employee_id: Optional[int] = None

    def can(self, permission: Permission) -> bool:
        return has_permission(self.role, permission)


def create_access_token(
    user_id: int,
    role: Role,
    employee_id: Optional[int] = None,
    expires_minutes: Optional[int] = None,
) -> str:
    """Создание JWT токена для пользователя"""
    now = datetime.now(timezone.utc)
    expire = now + timedelta(minutes=expires_minutes or settings.jwt_expire_minutes)
    payload = {
        "sub": str(user_id),
        "role": Role(role).value,
        "iat": now,
        "exp": expire,
    }
    if employee_id is not None:
        payload["employee_id"] = employee_id
    return jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> Optional[Actor]:
    """Проверка и декодирование JWT токена"""
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
        employee_id = payload.get("employee_id")
        return Actor(
            user_id=int(payload["sub"]),
            role=Role(payload["role"]),
            employee_id=int(employee_id) if employee_id is not None else None,
        )
    except jwt.ExpiredSignatureError:
        logger.info("Access token expired")
        return None
    except (jwt.InvalidTokenError, KeyError, ValueError) as e:
        logger.warning(f"Invalid access token: {e}")
        return None
