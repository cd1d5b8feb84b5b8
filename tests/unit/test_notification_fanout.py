"""Тесты рассылки уведомлений best-effort."""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from shared.services.notification_fanout import fan_out


def _employee(id_):
    return SimpleNamespace(id=id_)


@pytest.mark.asyncio
async def test_failure_does_not_stop_other_recipients():
    notifier = AsyncMock()
    notifier.notify.side_effect = [True, ConnectionError("SMTP unavailable"), True]

    outcomes = await fan_out(notifier, [(_employee(1), 10), (_employee(2), 11), (_employee(3), 12)])

    assert notifier.notify.await_count == 3
    assert [o.delivered for o in outcomes] == [True, False, True]
    assert outcomes[1].recipient_id == 2
    assert outcomes[1].payslip_id == 11
    assert "SMTP unavailable" in outcomes[1].error


@pytest.mark.asyncio
async def test_no_retries():
    notifier = AsyncMock()
    notifier.notify.side_effect = TimeoutError("timed out")

    outcomes = await fan_out(notifier, [(_employee(1), 10)])

    notifier.notify.assert_awaited_once()
    assert outcomes[0].delivered is False


@pytest.mark.asyncio
async def test_skipped_delivery_is_not_an_error():
    notifier = AsyncMock()
    notifier.notify.return_value = False

    outcomes = await fan_out(notifier, [(_employee(1), 10)])

    assert outcomes[0].delivered is False
    assert outcomes[0].error is None


@pytest.mark.asyncio
async def test_empty_deliveries():
    assert await fan_out(AsyncMock(), []) == []
