"""Подсчет неоплачиваемых дней сотрудника за период."""

from datetime import date
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from core.config.settings import settings
from domain.entities.attendance import Attendance, AttendanceStatus
from domain.entities.time_off import TimeOff, TimeOffStatus, TimeOffType
from shared.services.working_day_calculator import clip_range, is_weekend, iter_days, working_days


def count_unpaid_days(
    leave_ranges: Iterable[Tuple[date, date]],
    absent_dates: Sequence[date],
    period_start: date,
    period_end: date,
    deduplicate: bool = False,
) -> int:
    """
    Сводит отпуска без содержания и прогулы к числу неоплачиваемых дней.

    Без дедупликации: сумма рабочих дней обрезанных отпусков плюс по
    одному дню за каждую отметку ABSENT (выходные тоже считаются), один и
    тот же день может попасть в сумму дважды. С дедупликацией считаются
    уникальные даты: будние дни отпусков и даты прогулов.
    """
    if deduplicate:
        return len(unpaid_dates(leave_ranges, absent_dates, period_start, period_end))

    total = 0
    for leave_start, leave_end in leave_ranges:
        clipped = clip_range(leave_start, leave_end, period_start, period_end)
        if clipped is None:
            continue
        total += working_days(*clipped)
    return total + len(absent_dates)


def unpaid_dates(
    leave_ranges: Iterable[Tuple[date, date]],
    absent_dates: Sequence[date],
    period_start: date,
    period_end: date,
) -> Set[date]:
    """Уникальные неоплачиваемые даты периода."""
    dates: Set[date] = set()
    for leave_start, leave_end in leave_ranges:
        clipped = clip_range(leave_start, leave_end, period_start, period_end)
        if clipped is None:
            continue
        dates.update(day for day in iter_days(*clipped) if not is_weekend(day))
    dates.update(day for day in absent_dates if period_start <= day <= period_end)
    return dates


class UnpaidDaysService:
    """Агрегатор отпусков без содержания и прогулов."""

    def __init__(self, session: AsyncSession, deduplicate: Optional[bool] = None):
        self.session = session
        self.deduplicate = (
            settings.payroll_deduplicate_unpaid_days if deduplicate is None else deduplicate
        )

    async def get_unpaid_leave_ranges(
        self, employee_id: int, period_start: date, period_end: date
    ) -> List[Tuple[date, date]]:
        """Одобренные отпуска без содержания, пересекающие период."""
        query = select(TimeOff.from_date, TimeOff.to_date).where(
            TimeOff.employee_id == employee_id,
            TimeOff.status == TimeOffStatus.APPROVED.value,
            TimeOff.type == TimeOffType.UNPAID.value,
            TimeOff.from_date <= period_end,
            TimeOff.to_date >= period_start,
        ).order_by(TimeOff.from_date, TimeOff.id)
        result = await self.session.execute(query)
        return [(row.from_date, row.to_date) for row in result.all()]

    async def get_absent_dates(
        self, employee_id: int, period_start: date, period_end: date
    ) -> List[date]:
        """Даты отметок ABSENT внутри периода."""
        query = select(Attendance.date).where(
            Attendance.employee_id == employee_id,
            Attendance.status == AttendanceStatus.ABSENT.value,
            Attendance.date >= period_start,
            Attendance.date <= period_end,
        ).order_by(Attendance.date)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def unpaid_days(self, employee_id: int, period_start: date, period_end: date) -> int:
        """Число неоплачиваемых дней. Для несуществующего сотрудника 0."""
        leave_ranges = await self.get_unpaid_leave_ranges(employee_id, period_start, period_end)
        absent_dates = await self.get_absent_dates(employee_id, period_start, period_end)
        return count_unpaid_days(
            leave_ranges, absent_dates, period_start, period_end, deduplicate=self.deduplicate
        )
