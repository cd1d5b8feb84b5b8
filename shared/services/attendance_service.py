"""Сервис отметок прихода и ухода."""

from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import List, Optional, Tuple

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.logging.logger import logger
from core.utils.money import round_money
from domain.entities.attendance import Attendance, AttendanceStatus
from shared.services.exceptions import (
    AlreadyClockedInError,
    AlreadyClockedOutError,
    NoClockInError,
    ValidationError,
)

HALF_DAY_HOURS = Decimal("4")


@dataclass
class TodayAttendance:
    attendance: Optional[Attendance]
    can_clock_in: bool
    can_clock_out: bool


def _as_utc(value: datetime) -> datetime:
    # SQLite отдает время без tzinfo
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def worked_hours(check_in: datetime, check_out: datetime) -> Decimal:
    """Отработанные часы, округленные до сотых."""
    seconds = (_as_utc(check_out) - _as_utc(check_in)).total_seconds()
    return round_money(Decimal(str(seconds)) / Decimal("3600"))


def status_for_hours(hours: Decimal) -> AttendanceStatus:
    if Decimal("0") < hours < HALF_DAY_HOURS:
        return AttendanceStatus.HALF_DAY
    return AttendanceStatus.COMPLETED


class AttendanceService:
    """Одна запись на сотрудника в день."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, employee_id: int, day: date) -> Optional[Attendance]:
        query = select(Attendance).where(
            Attendance.employee_id == employee_id,
            Attendance.date == day,
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_today(self, employee_id: int, today: Optional[date] = None) -> TodayAttendance:
        """Сегодняшняя отметка и доступные действия."""
        today = today or datetime.now(timezone.utc).date()
        record = await self.get_record(employee_id, today)
        return TodayAttendance(
            attendance=record,
            can_clock_in=record is None or record.check_in is None,
            can_clock_out=record is not None and record.check_in is not None and record.check_out is None,
        )

    async def clock_in(self, employee_id: int, now: Optional[datetime] = None) -> Attendance:
        now = now or datetime.now(timezone.utc)
        record = await self.get_record(employee_id, now.date())

        if record is not None and record.check_in is not None:
            raise AlreadyClockedInError()

        if record is None:
            record = Attendance(employee_id=employee_id, date=now.date())
            self.session.add(record)
        record.check_in = now
        record.status = AttendanceStatus.PRESENT.value

        await self.session.commit()
        logger.info("Clocked in", employee_id=employee_id, attendance_id=record.id)
        return record

    async def clock_out(self, employee_id: int, now: Optional[datetime] = None) -> Attendance:
        now = now or datetime.now(timezone.utc)
        record = await self.get_record(employee_id, now.date())

        if record is None or record.check_in is None:
            raise NoClockInError()
        if record.check_out is not None:
            raise AlreadyClockedOutError()

        hours = worked_hours(record.check_in, now)
        record.check_out = now
        record.total_hours = hours
        record.status = status_for_hours(hours).value

        await self.session.commit()
        logger.info("Clocked out", employee_id=employee_id, attendance_id=record.id, total_hours=str(hours))
        return record

    async def mark_absent(self, employee_id: int, day: date) -> Attendance:
        """Отметка прогула. Каждая такая запись дает один неоплачиваемый день."""
        record = await self.get_record(employee_id, day)
        if record is None:
            record = Attendance(employee_id=employee_id, date=day)
            self.session.add(record)
        record.status = AttendanceStatus.ABSENT.value

        await self.session.commit()
        logger.info("Marked absent", employee_id=employee_id, date=day.isoformat())
        return record

    async def list_attendance(
        self,
        employee_id: Optional[int] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Attendance], int]:
        if date_from and date_to and date_from > date_to:
            raise ValidationError("date_from must not be after date_to")

        conditions = []
        if employee_id is not None:
            conditions.append(Attendance.employee_id == employee_id)
        if date_from:
            conditions.append(Attendance.date >= date_from)
        if date_to:
            conditions.append(Attendance.date <= date_to)

        query = (
            select(Attendance)
            .where(*conditions)
            .order_by(Attendance.date.desc(), Attendance.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self.session.execute(query)
        total = await self.session.scalar(select(func.count(Attendance.id)).where(*conditions))
        return list(result.scalars().all()), int(total or 0)
