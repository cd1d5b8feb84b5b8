"""Денежные утилиты."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

Number = Union[Decimal, int, float, str]

CENT = Decimal("0.01")
ZERO = Decimal("0.00")


def to_decimal(value: Number) -> Decimal:
    """Приводит значение к Decimal через строку, без артефактов float."""
    if isinstance(value, Decimal):
        return value
    if value is None:
        return Decimal("0")
    return Decimal(str(value))


def round_money(value: Number) -> Decimal:
    """Округление до копеек по правилу half-up."""
    return to_decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


def mask_bank_details(value: str) -> str:
    """Маскирует реквизиты, оставляя последние 4 символа."""
    raw = (value or "").strip()
    if len(raw) <= 4:
        return raw
    return "*" * (len(raw) - 4) + raw[-4:]
