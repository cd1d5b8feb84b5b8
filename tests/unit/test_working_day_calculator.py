"""Unit-тесты подсчета рабочих дней."""

from datetime import date, timedelta

import pytest

from shared.services.working_day_calculator import (
    clip_range,
    count_weekdays,
    is_weekend,
    working_days,
)


class TestWorkingDays:
    """Рабочие дни пн-пт включительно."""

    def test_full_month(self):
        """Январь 2024: 23 будних дня."""
        assert working_days(date(2024, 1, 1), date(2024, 1, 31)) == 23

    def test_single_weekday(self):
        assert working_days(date(2024, 1, 15), date(2024, 1, 15)) == 1

    @pytest.mark.parametrize("start_day", range(1, 8))
    def test_any_seven_day_window(self, start_day):
        """1-7 января 2024 покрывают все дни недели как начало диапазона."""
        start = date(2024, 1, start_day)
        assert working_days(start, start + timedelta(days=6)) == 5

    @pytest.mark.parametrize(
        "start, end",
        [
            (date(2024, 1, 6), date(2024, 1, 6)),
            (date(2024, 1, 6), date(2024, 1, 7)),
            (date(2024, 1, 31), date(2024, 1, 1)),
        ],
    )
    def test_no_weekdays_falls_back_to_standard_month(self, start, end):
        """Выходные и перевернутый диапазон дают 22, а не 0."""
        assert working_days(start, end) == 22

    def test_explicit_fallback(self):
        assert working_days(date(2024, 1, 6), date(2024, 1, 7), fallback=20) == 20

    def test_always_positive(self):
        day = date(2024, 2, 1)
        for offset in range(40):
            end = date.fromordinal(day.toordinal() + offset)
            assert working_days(day, end) >= 1

    def test_count_weekdays_without_fallback(self):
        assert count_weekdays(date(2024, 1, 6), date(2024, 1, 7)) == 0


class TestCalendarHelpers:
    def test_is_weekend(self):
        assert is_weekend(date(2024, 1, 6))
        assert is_weekend(date(2024, 1, 7))
        assert not is_weekend(date(2024, 1, 8))

    def test_clip_range_inside(self):
        assert clip_range(
            date(2023, 12, 28), date(2024, 1, 3), date(2024, 1, 1), date(2024, 1, 31)
        ) == (date(2024, 1, 1), date(2024, 1, 3))

    def test_clip_range_outside(self):
        assert clip_range(
            date(2024, 2, 1), date(2024, 2, 5), date(2024, 1, 1), date(2024, 1, 31)
        ) is None
