"""Сервис расчетных листов: генерация, перегенерация, выдача файлов."""

import asyncio
import os
from pathlib import Path
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.config.settings import settings
from core.logging.logger import logger
from domain.entities.base import utcnow
from domain.entities.employee import Employee
from domain.entities.payrun import PayrunLine
from domain.entities.payslip import Payslip
from shared.services.exceptions import NotFoundError, PermissionDeniedError
from shared.services.payslip_renderer import PayslipRenderer, ReportlabPayslipRenderer


def _line_context():
    """Опции загрузки строки ведомости со всем, что нужно для листа."""
    return [
        selectinload(PayrunLine.employee).selectinload(Employee.user),
        selectinload(PayrunLine.payrun),
    ]


class PayslipService:
    """Генерация и выдача расчетных листов."""

    def __init__(
        self,
        session: AsyncSession,
        renderer: Optional[PayslipRenderer] = None,
        payslips_dir: Optional[str] = None,
    ):
        self.session = session
        self.payslips_dir = payslips_dir or settings.payslips_dir
        self._renderer = renderer

    @property
    def renderer(self) -> PayslipRenderer:
        # Создается при первом рендеринге, чтению листов шрифты не нужны
        if self._renderer is None:
            self._renderer = ReportlabPayslipRenderer(output_dir=self.payslips_dir)
        return self._renderer

    async def generate_payslips_for_payrun(self, payrun_id: int) -> List[Payslip]:
        """
        Рендерит лист для каждой строки ведомости, у которой его еще нет.

        Каждый лист фиксируется отдельно. После сбоя рендеринга повторный
        вызов дорисует только недостающие листы.
        """
        query = (
            select(PayrunLine)
            .options(*_line_context(), selectinload(PayrunLine.payslip))
            .where(PayrunLine.payrun_id == payrun_id)
            .order_by(PayrunLine.id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(query)
        pending = [line for line in result.scalars().all() if line.payslip is None]

        payslips: List[Payslip] = []
        for line in pending:
            try:
                file_path = await self.renderer.render(line, line.employee, line.payrun)
            except Exception as e:
                logger.error(
                    "Payslip rendering failed",
                    payrun_id=payrun_id,
                    payrun_line_id=line.id,
                    generated=len(payslips),
                    error=str(e),
                )
                raise
            payslip = Payslip(payrun_line=line, file_path=file_path, generated_at=utcnow())
            self.session.add(payslip)
            await self.session.commit()
            payslips.append(payslip)

        logger.info("Payslips generated", payrun_id=payrun_id, count=len(payslips))
        return payslips

    async def _load_payslip(self, payslip_id: int) -> Payslip:
        query = (
            select(Payslip)
            .options(
                selectinload(Payslip.payrun_line).selectinload(PayrunLine.employee).selectinload(Employee.user),
                selectinload(Payslip.payrun_line).selectinload(PayrunLine.payrun),
            )
            .where(Payslip.id == payslip_id)
        )
        result = await self.session.execute(query)
        payslip = result.scalar_one_or_none()
        if payslip is None:
            raise NotFoundError("Payslip", payslip_id)
        return payslip

    async def get_payslip(self, payslip_id: int) -> Payslip:
        return await self._load_payslip(payslip_id)

    async def list_payslips(
        self, page: int = 1, limit: int = 10, employee_id: Optional[int] = None
    ) -> Tuple[List[Payslip], int]:
        query = select(Payslip).options(
            selectinload(Payslip.payrun_line).selectinload(PayrunLine.employee).selectinload(Employee.user),
            selectinload(Payslip.payrun_line).selectinload(PayrunLine.payrun),
        )
        count_query = select(func.count(Payslip.id))
        if employee_id is not None:
            query = query.join(Payslip.payrun_line).where(PayrunLine.employee_id == employee_id)
            count_query = count_query.join(Payslip.payrun_line).where(PayrunLine.employee_id == employee_id)

        query = query.order_by(Payslip.generated_at.desc(), Payslip.id.desc())
        query = query.offset((page - 1) * limit).limit(limit)

        result = await self.session.execute(query)
        total = await self.session.scalar(count_query)
        return list(result.scalars().all()), int(total or 0)

    async def regenerate_payslip(self, payslip_id: int) -> Payslip:
        """Заменяет файл листа новым и обновляет время генерации."""
        payslip = await self._load_payslip(payslip_id)
        line = payslip.payrun_line

        old_path = payslip.file_path
        if old_path and await asyncio.to_thread(os.path.exists, old_path):
            await asyncio.to_thread(os.remove, old_path)

        payslip.file_path = await self.renderer.render(line, line.employee, line.payrun)
        payslip.generated_at = utcnow()
        await self.session.commit()

        logger.info("Payslip regenerated", payslip_id=payslip_id, file_path=payslip.file_path)
        return payslip

    def resolve_download_path(self, payslip: Payslip) -> Path:
        """Путь к файлу листа, только внутри каталога расчетных листов."""
        root = Path(self.payslips_dir).resolve()
        file_path = Path(payslip.file_path).resolve()
        if root not in file_path.parents:
            logger.warning("Payslip path outside payslips dir", payslip_id=payslip.id)
            raise PermissionDeniedError("Access denied")
        if not file_path.is_file():
            raise NotFoundError("Payslip file", payslip.id)
        return file_path
