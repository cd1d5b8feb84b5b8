"""Сервис заявок на отпуск."""

from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from core.logging.logger import logger
from domain.entities.employee import Employee
from domain.entities.time_off import TimeOff, TimeOffStatus, TimeOffType
from shared.services.exceptions import NotFoundError, TimeOffAlreadyProcessedError, ValidationError

MIN_REASON_LENGTH = 5


class TimeOffService:
    """Создание заявок и перевод их из PENDING в APPROVED/REJECTED."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create_request(
        self,
        employee_id: int,
        from_date: date,
        to_date: date,
        leave_type: str,
        reason: str,
        today: Optional[date] = None,
    ) -> TimeOff:
        today = today or date.today()
        reason = (reason or "").strip()

        if leave_type not in {t.value for t in TimeOffType}:
            raise ValidationError("Valid leave type required", {"type": leave_type})
        if from_date >= to_date:
            raise ValidationError("From date must be before to date")
        if from_date < today:
            raise ValidationError("Cannot request leave for past dates")
        if len(reason) < MIN_REASON_LENGTH:
            raise ValidationError(f"Reason must be at least {MIN_REASON_LENGTH} characters")

        time_off = TimeOff(
            employee_id=employee_id,
            from_date=from_date,
            to_date=to_date,
            type=leave_type,
            reason=reason,
            status=TimeOffStatus.PENDING.value,
        )
        self.session.add(time_off)
        await self.session.commit()

        logger.info(
            "Time off request created",
            time_off_id=time_off.id,
            employee_id=employee_id,
            type=leave_type,
        )
        return time_off

    async def get_request(self, time_off_id: int) -> TimeOff:
        query = (
            select(TimeOff)
            .options(selectinload(TimeOff.employee).selectinload(Employee.user))
            .where(TimeOff.id == time_off_id)
        )
        result = await self.session.execute(query)
        time_off = result.scalar_one_or_none()
        if time_off is None:
            raise NotFoundError("Time off request", time_off_id)
        return time_off

    async def _resolve(self, time_off_id: int, approver_id: int, status: TimeOffStatus) -> TimeOff:
        time_off = await self.get_request(time_off_id)
        if time_off.status != TimeOffStatus.PENDING.value:
            raise TimeOffAlreadyProcessedError(time_off_id, time_off.status)

        time_off.status = status.value
        time_off.approver_id = approver_id
        return time_off

    async def approve(self, time_off_id: int, approver_id: int) -> TimeOff:
        time_off = await self._resolve(time_off_id, approver_id, TimeOffStatus.APPROVED)
        await self.session.commit()
        logger.info("Time off approved", time_off_id=time_off_id, approver_id=approver_id)
        return time_off

    async def reject(self, time_off_id: int, approver_id: int, reason: Optional[str] = None) -> TimeOff:
        time_off = await self._resolve(time_off_id, approver_id, TimeOffStatus.REJECTED)
        if reason:
            time_off.reason = f"{time_off.reason} | Rejection reason: {reason}"
        await self.session.commit()
        logger.info("Time off rejected", time_off_id=time_off_id, approver_id=approver_id)
        return time_off

    async def list_requests(
        self,
        status: Optional[str] = None,
        employee_id: Optional[int] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[TimeOff], int]:
        query = select(TimeOff)
        count_query = select(func.count(TimeOff.id))
        if status:
            query = query.where(TimeOff.status == status)
            count_query = count_query.where(TimeOff.status == status)
        if employee_id is not None:
            query = query.where(TimeOff.employee_id == employee_id)
            count_query = count_query.where(TimeOff.employee_id == employee_id)

        query = query.order_by(TimeOff.created_at.desc(), TimeOff.id.desc())
        query = query.offset((page - 1) * limit).limit(limit)

        result = await self.session.execute(query)
        total = await self.session.scalar(count_query)
        return list(result.scalars().all()), int(total or 0)
