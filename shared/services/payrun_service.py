"""Чтение и удаление зафиксированных ведомостей."""

from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.logging.logger import logger
from domain.entities.employee import Employee
from domain.entities.payrun import Payrun, PayrunLine
from shared.services.exceptions import NotFoundError, PayrunFinalizedError


def _with_lines():
    """Опции загрузки строк вместе с сотрудниками и листами."""
    lines = selectinload(Payrun.lines)
    return [
        lines.selectinload(PayrunLine.employee).selectinload(Employee.user),
        lines.selectinload(PayrunLine.payslip),
    ]


class PayrunService:
    """Сервис ведомостей только для чтения, плюс удаление черновиков."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_payruns(
        self, page: int = 1, limit: int = 10, status: Optional[str] = None
    ) -> Tuple[List[Payrun], int]:
        """Страница ведомостей, новые первыми."""
        query = select(Payrun).options(*_with_lines())
        count_query = select(func.count(Payrun.id))
        if status:
            query = query.where(Payrun.status == status)
            count_query = count_query.where(Payrun.status == status)

        query = query.order_by(Payrun.created_at.desc(), Payrun.id.desc())
        query = query.offset((page - 1) * limit).limit(limit)

        result = await self.session.execute(query)
        total = await self.session.scalar(count_query)
        return list(result.scalars().all()), int(total or 0)

    async def get_payrun(self, payrun_id: int) -> Payrun:
        query = (
            select(Payrun)
            .options(*_with_lines())
            .where(Payrun.id == payrun_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        payrun = result.scalar_one_or_none()
        if payrun is None:
            raise NotFoundError("Payrun", payrun_id)
        return payrun

    async def delete_payrun(self, payrun_id: int) -> None:
        """Удаляет ведомость со строками. Зафиксированные удалять нельзя."""
        payrun = await self.get_payrun(payrun_id)
        if payrun.is_finalized:
            logger.warning("Attempt to delete finalized payrun", payrun_id=payrun_id)
            raise PayrunFinalizedError(payrun_id)

        await self.session.delete(payrun)
        await self.session.commit()
        logger.info(
            "Payrun deleted",
            payrun_id=payrun_id,
            period_start=payrun.period_start.isoformat(),
            period_end=payrun.period_end.isoformat(),
        )
