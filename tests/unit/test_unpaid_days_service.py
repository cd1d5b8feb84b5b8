"""Тесты подсчета неоплачиваемых дней."""

from datetime import date

import pytest

from domain.entities.attendance import Attendance, AttendanceStatus
from domain.entities.time_off import TimeOff, TimeOffStatus, TimeOffType
from shared.services.unpaid_days_service import UnpaidDaysService, count_unpaid_days, unpaid_dates

JAN_START = date(2024, 1, 1)
JAN_END = date(2024, 1, 31)


class TestCountUnpaidDays:
    """Чистая функция свода отпусков и прогулов."""

    def test_leave_inside_period(self):
        ranges = [(date(2024, 1, 15), date(2024, 1, 16))]
        assert count_unpaid_days(ranges, [], JAN_START, JAN_END) == 2

    def test_leave_clipped_to_period(self):
        """Отпуск 28.12-03.01 дает только 1-3 января."""
        ranges = [(date(2023, 12, 28), date(2024, 1, 3))]
        assert count_unpaid_days(ranges, [], JAN_START, JAN_END) == 3

    def test_leave_outside_period_ignored(self):
        ranges = [(date(2024, 2, 5), date(2024, 2, 9))]
        assert count_unpaid_days(ranges, [], JAN_START, JAN_END) == 0

    def test_absent_counts_one_day_each_even_on_weekend(self):
        absents = [date(2024, 1, 6), date(2024, 1, 10)]
        assert count_unpaid_days([], absents, JAN_START, JAN_END) == 2

    def test_overlap_counted_twice_by_default(self):
        """Прогул в день отпуска попадает в сумму дважды."""
        ranges = [(date(2024, 1, 15), date(2024, 1, 16))]
        absents = [date(2024, 1, 15)]
        assert count_unpaid_days(ranges, absents, JAN_START, JAN_END) == 3

    def test_overlap_counted_once_with_deduplication(self):
        ranges = [(date(2024, 1, 15), date(2024, 1, 16))]
        absents = [date(2024, 1, 15)]
        assert count_unpaid_days(ranges, absents, JAN_START, JAN_END, deduplicate=True) == 2

    def test_weekend_only_leave_uses_standard_month(self):
        """Отпуск только на выходные без дедупликации дает 22 дня."""
        ranges = [(date(2024, 1, 6), date(2024, 1, 7))]
        assert count_unpaid_days(ranges, [], JAN_START, JAN_END) == 22
        assert count_unpaid_days(ranges, [], JAN_START, JAN_END, deduplicate=True) == 0

    def test_unpaid_dates_skip_weekends_in_leave(self):
        ranges = [(date(2024, 1, 5), date(2024, 1, 8))]
        assert unpaid_dates(ranges, [], JAN_START, JAN_END) == {date(2024, 1, 5), date(2024, 1, 8)}


class TestUnpaidDaysService:
    """Выборка из БД: только одобренные UNPAID отпуска и ABSENT отметки."""

    @pytest.mark.asyncio
    async def test_only_approved_unpaid_leave_counts(self, db_session, employee_factory):
        employee = await employee_factory()
        db_session.add_all([
            TimeOff(
                employee_id=employee.id, from_date=date(2024, 1, 15), to_date=date(2024, 1, 16),
                type=TimeOffType.UNPAID.value, reason="Family matters", status=TimeOffStatus.APPROVED.value,
            ),
            TimeOff(
                employee_id=employee.id, from_date=date(2024, 1, 22), to_date=date(2024, 1, 23),
                type=TimeOffType.UNPAID.value, reason="Pending request", status=TimeOffStatus.PENDING.value,
            ),
            TimeOff(
                employee_id=employee.id, from_date=date(2024, 1, 24), to_date=date(2024, 1, 25),
                type=TimeOffType.SICK.value, reason="Caught a cold", status=TimeOffStatus.APPROVED.value,
            ),
        ])
        await db_session.commit()

        service = UnpaidDaysService(db_session, deduplicate=False)
        assert await service.unpaid_days(employee.id, JAN_START, JAN_END) == 2

    @pytest.mark.asyncio
    async def test_absent_records_in_period(self, db_session, employee_factory):
        employee = await employee_factory()
        db_session.add_all([
            Attendance(employee_id=employee.id, date=date(2024, 1, 10), status=AttendanceStatus.ABSENT.value),
            Attendance(employee_id=employee.id, date=date(2024, 1, 11), status=AttendanceStatus.COMPLETED.value),
            Attendance(employee_id=employee.id, date=date(2024, 2, 1), status=AttendanceStatus.ABSENT.value),
        ])
        await db_session.commit()

        service = UnpaidDaysService(db_session)
        assert await service.get_absent_dates(employee.id, JAN_START, JAN_END) == [date(2024, 1, 10)]
        assert await service.unpaid_days(employee.id, JAN_START, JAN_END) == 1

    @pytest.mark.asyncio
    async def test_deduplication_setting(self, db_session, employee_factory):
        employee = await employee_factory()
        db_session.add_all([
            TimeOff(
                employee_id=employee.id, from_date=date(2024, 1, 15), to_date=date(2024, 1, 16),
                type=TimeOffType.UNPAID.value, reason="Family matters", status=TimeOffStatus.APPROVED.value,
            ),
            Attendance(employee_id=employee.id, date=date(2024, 1, 15), status=AttendanceStatus.ABSENT.value),
        ])
        await db_session.commit()

        assert await UnpaidDaysService(db_session, deduplicate=False).unpaid_days(employee.id, JAN_START, JAN_END) == 3
        assert await UnpaidDaysService(db_session, deduplicate=True).unpaid_days(employee.id, JAN_START, JAN_END) == 2

    @pytest.mark.asyncio
    async def test_unknown_employee_has_zero(self, db_session):
        assert await UnpaidDaysService(db_session).unpaid_days(9999, JAN_START, JAN_END) == 0
