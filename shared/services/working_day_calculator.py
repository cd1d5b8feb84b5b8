"""Подсчет рабочих (будних) дней в диапазоне дат."""

from datetime import date, timedelta
from typing import Iterator, Optional, Tuple

from core.config.settings import settings

SATURDAY = 5
SUNDAY = 6


def is_weekend(day: date) -> bool:
    return day.weekday() in (SATURDAY, SUNDAY)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Все календарные дни от start до end включительно."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def count_weekdays(start: date, end: date) -> int:
    """Число будних дней без подстановки для пустого диапазона."""
    return sum(1 for day in iter_days(start, end) if not is_weekend(day))


def working_days(start: date, end: date, fallback: Optional[int] = None) -> int:
    """
    Рабочие дни (пн-пт) между датами включительно.

    Если будних дней нет (один выходной день, пустой или перевернутый
    диапазон), возвращается стандартный месяц, а не 0: результат идет
    в знаменатель дневной ставки.
    """
    count = count_weekdays(start, end)
    if count:
        return count
    return fallback if fallback is not None else settings.payroll_working_days_per_month


def clip_range(
    start: date, end: date, period_start: date, period_end: date
) -> Optional[Tuple[date, date]]:
    """Пересечение диапазона с периодом или None."""
    clipped_start = max(start, period_start)
    clipped_end = min(end, period_end)
    if clipped_start > clipped_end:
        return None
    return clipped_start, clipped_end
