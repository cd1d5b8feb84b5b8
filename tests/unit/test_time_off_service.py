"""Тесты TimeOffService."""

from datetime import date

import pytest

from domain.entities.time_off import TimeOffStatus, TimeOffType
from shared.services.exceptions import NotFoundError, TimeOffAlreadyProcessedError, ValidationError
from shared.services.time_off_service import TimeOffService

TODAY = date(2024, 1, 10)


async def _request(service, employee_id, **kwargs):
    params = {
        "from_date": date(2024, 1, 15),
        "to_date": date(2024, 1, 16),
        "leave_type": TimeOffType.UNPAID.value,
        "reason": "Family matters",
        "today": TODAY,
    }
    params.update(kwargs)
    return await service.create_request(employee_id=employee_id, **params)


class TestCreateRequest:
    @pytest.mark.asyncio
    async def test_created_pending(self, db_session, employee_factory):
        employee = await employee_factory()
        time_off = await _request(TimeOffService(db_session), employee.id)

        assert time_off.id is not None
        assert time_off.status == TimeOffStatus.PENDING.value
        assert time_off.approver_id is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "overrides",
        [
            {"from_date": date(2024, 1, 16), "to_date": date(2024, 1, 16)},
            {"from_date": date(2024, 1, 17), "to_date": date(2024, 1, 16)},
            {"from_date": date(2024, 1, 5), "to_date": date(2024, 1, 12)},
            {"reason": "tiny"},
            {"leave_type": "VACATION"},
        ],
    )
    async def test_invalid_requests(self, db_session, overrides):
        with pytest.raises(ValidationError):
            await _request(TimeOffService(db_session), 1, **overrides)


class TestResolveRequest:
    @pytest.mark.asyncio
    async def test_approve(self, db_session, employee_factory):
        employee = await employee_factory()
        service = TimeOffService(db_session)
        time_off = await _request(service, employee.id)

        approved = await service.approve(time_off.id, approver_id=77)

        assert approved.status == TimeOffStatus.APPROVED.value
        assert approved.approver_id == 77

    @pytest.mark.asyncio
    async def test_reject_appends_reason(self, db_session, employee_factory):
        employee = await employee_factory()
        service = TimeOffService(db_session)
        time_off = await _request(service, employee.id)

        rejected = await service.reject(time_off.id, approver_id=77, reason="Release week")

        assert rejected.status == TimeOffStatus.REJECTED.value
        assert rejected.reason == "Family matters | Rejection reason: Release week"

    @pytest.mark.asyncio
    async def test_processed_request_cannot_change(self, db_session, employee_factory):
        employee = await employee_factory()
        service = TimeOffService(db_session)
        time_off = await _request(service, employee.id)
        await service.approve(time_off.id, approver_id=77)

        with pytest.raises(TimeOffAlreadyProcessedError):
            await service.reject(time_off.id, approver_id=78)

        assert (await service.get_request(time_off.id)).status == TimeOffStatus.APPROVED.value

    @pytest.mark.asyncio
    async def test_missing_request(self, db_session):
        with pytest.raises(NotFoundError):
            await TimeOffService(db_session).approve(1, approver_id=77)

    @pytest.mark.asyncio
    async def test_list_filters(self, db_session, employee_factory):
        first = await employee_factory(code="EMP001")
        second = await employee_factory(code="EMP002")
        service = TimeOffService(db_session)
        own = await _request(service, first.id)
        other = await _request(service, second.id)
        await service.approve(other.id, approver_id=77)

        items, total = await service.list_requests(employee_id=first.id)
        assert total == 1
        assert items[0].id == own.id

        items, total = await service.list_requests(status=TimeOffStatus.APPROVED.value)
        assert [item.id for item in items] == [other.id]
