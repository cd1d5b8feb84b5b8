"""Рассылка уведомлений по принципу best-effort."""

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol, Tuple

from core.logging.logger import logger
from domain.entities.employee import Employee


class PayslipNotifier(Protocol):
    """Уведомление сотрудника о готовом листе."""

    async def notify(self, employee: Employee, payslip_id: int) -> bool:
        ...


@dataclass
class DeliveryOutcome:
    recipient_id: int
    payslip_id: int
    delivered: bool
    error: Optional[str] = None


async def fan_out(
    notifier: PayslipNotifier,
    deliveries: Iterable[Tuple[Employee, int]],
) -> List[DeliveryOutcome]:
    """
    Отправляет уведомления каждому получателю по очереди.

    Ошибка одного получателя логируется и попадает в результат, остальные
    продолжают получать уведомления. Повторных попыток нет.
    """
    outcomes: List[DeliveryOutcome] = []
    for employee, payslip_id in deliveries:
        try:
            delivered = bool(await notifier.notify(employee, payslip_id))
            outcomes.append(DeliveryOutcome(employee.id, payslip_id, delivered))
        except Exception as e:
            logger.error(
                "Failed to send payslip notification",
                employee_id=employee.id,
                payslip_id=payslip_id,
                error=str(e),
            )
            outcomes.append(DeliveryOutcome(employee.id, payslip_id, False, str(e)))
    return outcomes
