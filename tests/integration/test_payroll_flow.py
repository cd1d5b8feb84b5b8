"""
Интеграционный тест полного цикла расчета зарплаты через HTTP:
заявка на отпуск -> согласование -> расчет -> фиксация -> листы -> защита от удаления
"""

from datetime import date

import pytest

from core.auth.permissions import Role
from domain.entities.time_off import TimeOff, TimeOffStatus, TimeOffType

pytestmark = pytest.mark.integration

PERIOD = {"periodStart": "2024-01-01", "periodEnd": "2024-01-31"}


def test_full_payroll_cycle(api):
    regular = api.add_employee(code="EMP001", name="Regular Employee")
    on_leave = api.add_employee(code="EMP002", name="Employee On Leave")
    joiner = api.add_employee(code="EMP003", name="New Joiner", join_date=date(2024, 1, 16))

    async def add_unpaid_leave(session):
        # Прошедшие даты нельзя создать через API, поэтому заявка пишется напрямую
        time_off = TimeOff(
            employee_id=on_leave.id,
            from_date=date(2024, 1, 15),
            to_date=date(2024, 1, 16),
            type=TimeOffType.UNPAID.value,
            reason="Family matters",
            status=TimeOffStatus.PENDING.value,
        )
        session.add(time_off)
        await session.commit()
        return time_off.id

    time_off_id = api.run(add_unpaid_leave)
    payroll = api.headers(Role.PAYROLL, user_id=2)

    # Пока отпуск не согласован, удержаний нет
    preview = api.client.post("/api/v1/payroll/compute", json=PERIOD, headers=payroll).json()
    nets = {line["employeeId"]: line["net"] for line in preview["payrollData"]}
    assert nets == {regular.id: 48800.0, on_leave.id: 48800.0, joiner.id: 48800.0}

    approved = api.client.post(f"/api/v1/time-off/{time_off_id}/approve", headers=api.headers(Role.HR))
    assert approved.status_code == 200

    preview = api.client.post("/api/v1/payroll/compute", json=PERIOD, headers=payroll).json()
    lines = {line["employeeId"]: line for line in preview["payrollData"]}
    assert lines[on_leave.id]["unpaidDays"] == 2
    assert lines[on_leave.id]["net"] == 44452.17
    assert lines[joiner.id]["workingDays"] == 12
    assert lines[joiner.id]["net"] == 48800.0
    assert preview["summary"]["totalNet"] == 142052.17

    # Повторный расчет дает тот же результат
    again = api.client.post("/api/v1/payroll/compute", json=PERIOD, headers=payroll).json()
    assert again == preview

    finalized = api.client.post("/api/v1/payroll/finalize", json=PERIOD, headers=payroll)
    assert finalized.status_code == 200
    body = finalized.json()
    assert body["payslipsGenerated"] == 3
    assert body["payrun"]["totalNet"] == 142052.17
    assert body["payrun"]["totalGross"] == 165000.0
    assert body["summary"] == preview["summary"]

    payrun_id = body["payrun"]["id"]
    detail = api.client.get(f"/api/v1/payroll/{payrun_id}", headers=payroll).json()
    assert len(detail["lines"]) == 3
    assert sum(line["net"] for line in detail["lines"]) == pytest.approx(detail["totalNet"])
    assert all(line["payslip"] is not None for line in detail["lines"])
    assert {line["remarks"] for line in detail["lines"]} == {
        "Working Days: 23, Unpaid Days: 0",
        "Working Days: 23, Unpaid Days: 2",
        "Working Days: 12, Unpaid Days: 0",
    }

    own = api.client.get("/api/v1/payslips", headers=api.headers(Role.EMPLOYEE, employee_id=on_leave.id)).json()
    assert own["pagination"]["total"] == 1
    assert own["payslips"][0]["payrunLine"]["net"] == 44452.17

    deleted = api.client.delete(f"/api/v1/payroll/{payrun_id}", headers=api.headers(Role.ADMIN))
    assert deleted.status_code == 400
    assert api.client.get(f"/api/v1/payroll/{payrun_id}", headers=payroll).status_code == 200

    duplicate = api.client.post("/api/v1/payroll/finalize", json=PERIOD, headers=payroll)
    assert duplicate.status_code == 400
