"""Тесты PayslipService: генерация, перегенерация и выдача файлов."""

import os
from datetime import date
from pathlib import Path

import pytest

from domain.entities.payslip import Payslip
from shared.services.exceptions import NotFoundError, PermissionDeniedError
from shared.services.payroll_service import PayrollService
from shared.services.payslip_service import PayslipService


async def _finalized_payrun(session):
    service = PayrollService(session)
    lines = await service.compute_payroll(date(2024, 1, 1), date(2024, 1, 31))
    payrun, _ = await service.finalize_payroll(date(2024, 1, 1), date(2024, 1, 31), lines, created_by=None)
    return payrun


class TestGeneratePayslips:
    @pytest.mark.asyncio
    async def test_one_payslip_per_line(self, db_session, employee_factory, fake_renderer, payslips_dir):
        first = await employee_factory(code="EMP001")
        second = await employee_factory(code="EMP002")
        payrun = await _finalized_payrun(db_session)

        payslips = await PayslipService(db_session, renderer=fake_renderer).generate_payslips_for_payrun(payrun.id)

        assert len(payslips) == 2
        assert all(p.id is not None for p in payslips)
        assert [call[1] for call in fake_renderer.calls] == [first.id, second.id]
        for payslip in payslips:
            assert Path(payslip.file_path).parent == payslips_dir
            assert Path(payslip.file_path).name.startswith("payslip_EMP00")

    @pytest.mark.asyncio
    async def test_resume_after_render_failure(self, db_session, employee_factory, fake_renderer):
        await employee_factory(code="EMP001")
        second = await employee_factory(code="EMP002")
        payrun = await _finalized_payrun(db_session)
        service = PayslipService(db_session, renderer=fake_renderer)

        fake_renderer.fail_after = 1
        with pytest.raises(OSError):
            await service.generate_payslips_for_payrun(payrun.id)

        _, total = await service.list_payslips()
        assert total == 1

        fake_renderer.fail_after = None
        resumed = await service.generate_payslips_for_payrun(payrun.id)

        assert len(resumed) == 1
        assert fake_renderer.calls[-1][1] == second.id
        _, total = await service.list_payslips()
        assert total == 2

    @pytest.mark.asyncio
    async def test_repeated_generation_is_noop(self, db_session, employee_factory, fake_renderer):
        await employee_factory()
        payrun = await _finalized_payrun(db_session)
        service = PayslipService(db_session, renderer=fake_renderer)

        assert len(await service.generate_payslips_for_payrun(payrun.id)) == 1
        assert await service.generate_payslips_for_payrun(payrun.id) == []
        assert len(fake_renderer.calls) == 1

    def test_renderer_not_built_for_reads(self, mock_db_session, payslips_dir, monkeypatch):
        built = []
        monkeypatch.setattr(
            "shared.services.payslip_service.ReportlabPayslipRenderer",
            lambda output_dir: built.append(output_dir) or "renderer",
        )

        service = PayslipService(mock_db_session)
        assert built == []
        assert service.renderer == "renderer"
        assert built == [str(payslips_dir)]

    @pytest.mark.asyncio
    async def test_empty_payrun_generates_nothing(self, db_session, fake_renderer):
        payrun = await _finalized_payrun(db_session)
        payslips = await PayslipService(db_session, renderer=fake_renderer).generate_payslips_for_payrun(payrun.id)
        assert payslips == []


class TestPayslipAccess:
    @pytest.mark.asyncio
    async def test_list_filtered_by_employee(self, db_session, employee_factory, fake_renderer):
        first = await employee_factory(code="EMP001")
        await employee_factory(code="EMP002")
        payrun = await _finalized_payrun(db_session)
        service = PayslipService(db_session, renderer=fake_renderer)
        await service.generate_payslips_for_payrun(payrun.id)

        payslips, total = await service.list_payslips(employee_id=first.id)
        assert total == 1
        assert payslips[0].payrun_line.employee_id == first.id
        assert payslips[0].payrun_line.payrun.id == payrun.id

        _, total_all = await service.list_payslips()
        assert total_all == 2

    @pytest.mark.asyncio
    async def test_get_missing_payslip(self, db_session, fake_renderer):
        with pytest.raises(NotFoundError):
            await PayslipService(db_session, renderer=fake_renderer).get_payslip(1)

    @pytest.mark.asyncio
    async def test_regenerate_replaces_file(self, db_session, employee_factory, fake_renderer):
        await employee_factory()
        payrun = await _finalized_payrun(db_session)
        service = PayslipService(db_session, renderer=fake_renderer)
        [payslip] = await service.generate_payslips_for_payrun(payrun.id)
        old_path = payslip.file_path
        old_generated_at = payslip.generated_at

        regenerated = await service.regenerate_payslip(payslip.id)

        assert regenerated.id == payslip.id
        assert regenerated.file_path != old_path
        assert not os.path.exists(old_path)
        assert os.path.exists(regenerated.file_path)
        assert regenerated.generated_at >= old_generated_at

    def test_download_path_inside_payslips_dir(self, payslips_dir, fake_renderer, mock_db_session):
        file_path = payslips_dir / "payslip_EMP001_1.pdf"
        file_path.write_bytes(b"%PDF")
        payslip = Payslip(id=1, payrun_line_id=1, file_path=str(file_path))

        service = PayslipService(mock_db_session, renderer=fake_renderer)
        assert service.resolve_download_path(payslip) == file_path.resolve()

    def test_download_path_outside_payslips_dir_denied(self, tmp_path, payslips_dir, fake_renderer, mock_db_session):
        outside = tmp_path / "secret.pdf"
        outside.write_bytes(b"%PDF")
        traversal = Payslip(id=2, payrun_line_id=1, file_path=str(payslips_dir / ".." / "secret.pdf"))

        service = PayslipService(mock_db_session, renderer=fake_renderer)
        with pytest.raises(PermissionDeniedError):
            service.resolve_download_path(traversal)

    def test_download_missing_file(self, payslips_dir, fake_renderer, mock_db_session):
        payslip = Payslip(id=3, payrun_line_id=1, file_path=str(payslips_dir / "gone.pdf"))

        service = PayslipService(mock_db_session, renderer=fake_renderer)
        with pytest.raises(NotFoundError):
            service.resolve_download_path(payslip)
