"""
Типизированные ошибки сервисов HRMS.

Каждая ошибка несет машиночитаемый ``code``; HTTP слой переводит ошибки в
единый JSON ответ по классу, а не по тексту сообщения.

    HRMSError
    +-- ValidationError
    +-- NotFoundError
    +-- PermissionDeniedError
    +-- StateConflictError
        +-- PayrunFinalizedError
        +-- PayrunAlreadyExistsError
        +-- TimeOffAlreadyProcessedError
        +-- AlreadyClockedInError
        +-- AlreadyClockedOutError
        +-- NoClockInError
        +-- EmployeeAlreadyExistsError
"""

from datetime import date
from typing import Any, Dict, Optional


class HRMSError(Exception):
    """Базовая ошибка сервисов."""

    code: str = "HRMS_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(HRMSError):
    """Некорректные входные данные, до начала вычислений."""

    code = "VALIDATION_ERROR"


class NotFoundError(HRMSError):
    """Запрошенная запись не существует."""

    code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: Any):
        super().__init__(f"{entity} not found", {"entity": entity, "id": entity_id})
        self.entity = entity
        self.entity_id = entity_id


class PermissionDeniedError(HRMSError):
    """Действие запрещено для текущего пользователя."""

    code = "PERMISSION_DENIED"


class StateConflictError(HRMSError):
    """Операция противоречит текущему состоянию записи, данные не изменены."""

    code = "STATE_CONFLICT"


class PayrunFinalizedError(StateConflictError):
    code = "PAYRUN_FINALIZED"

    def __init__(self, payrun_id: int):
        super().__init__("Cannot delete finalized payrun", {"payrun_id": payrun_id})
        self.payrun_id = payrun_id


class PayrunAlreadyExistsError(StateConflictError):
    code = "PAYRUN_ALREADY_EXISTS"

    def __init__(self, period_start: date, period_end: date):
        super().__init__(
            f"Payrun for period {period_start.isoformat()} - {period_end.isoformat()} already exists",
            {"period_start": period_start.isoformat(), "period_end": period_end.isoformat()},
        )
        self.period_start = period_start
        self.period_end = period_end


class TimeOffAlreadyProcessedError(StateConflictError):
    code = "TIMEOFF_ALREADY_PROCESSED"

    def __init__(self, time_off_id: int, status: str):
        super().__init__("Request has already been processed", {"id": time_off_id, "status": status})


class AlreadyClockedInError(StateConflictError):
    code = "ALREADY_CLOCKED_IN"

    def __init__(self):
        super().__init__("Already clocked in today")


class AlreadyClockedOutError(StateConflictError):
    code = "ALREADY_CLOCKED_OUT"

    def __init__(self):
        super().__init__("Already clocked out today")


class NoClockInError(StateConflictError):
    code = "NO_CLOCK_IN"

    def __init__(self):
        super().__init__("No clock-in record found for today")


class EmployeeAlreadyExistsError(StateConflictError):
    code = "EMPLOYEE_ALREADY_EXISTS"

    def __init__(self, user_id: int):
        super().__init__("Employee record already exists for this user", {"user_id": user_id})
