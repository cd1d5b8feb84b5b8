"""
Конфигурация pytest для тестов HRMS
Объединяет фикстуры БД, моки для unit тестов и тестовый HTTP клиент
"""
import asyncio
import os
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from apps.api.app import create_app
from apps.api.dependencies import get_payslip_notifier, get_payslip_renderer
from core.auth.permissions import Role
from core.auth.tokens import create_access_token
from core.config.settings import settings
from core.database.session import get_db_session
from domain.entities import Base
from domain.entities.employee import Employee, EmployeeStatus
from domain.entities.user import User
from shared.services.payslip_renderer import payslip_file_name


def sqlite_url(tmp_path) -> str:
    return f"sqlite+aiosqlite:///{tmp_path / 'hrms_test.db'}"


async def create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


class FakePayslipRenderer:
    """Рендерер без reportlab: пишет маленький файл и запоминает вызовы."""

    def __init__(self, output_dir: str, fail_after=None):
        self.output_dir = output_dir
        self.fail_after = fail_after
        self.calls = []

    async def render(self, line, employee, payrun) -> str:
        if self.fail_after is not None and len(self.calls) >= self.fail_after:
            raise OSError("No space left on device")
        self.calls.append((line.id, employee.id, payrun.id))
        os.makedirs(self.output_dir, exist_ok=True)
        file_name = payslip_file_name(employee.employee_code, timestamp_ms=len(self.calls))
        file_path = os.path.join(self.output_dir, file_name)
        with open(file_path, "wb") as f:
            f.write(b"%PDF-1.4 test payslip")
        return file_path


class FakeNotifier:
    """Уведомитель, который падает для заданных сотрудников."""

    def __init__(self, failing_ids=()):
        self.failing_ids = set(failing_ids)
        self.sent = []

    async def notify(self, employee, payslip_id) -> bool:
        if employee.id in self.failing_ids:
            raise ConnectionError("SMTP unavailable")
        self.sent.append((employee.id, payslip_id))
        return True


# =============================================================================
# Фикстуры для работы с БД (SQLite в памяти процесса, файл на тест)
# =============================================================================

@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """Создать тестовый движок БД."""
    engine = create_async_engine(sqlite_url(tmp_path), poolclass=NullPool, echo=False)
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine):
    """Создать сессию БД для каждого теста."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with session_maker() as session:
        yield session


@pytest.fixture
def payslips_dir(tmp_path, monkeypatch):
    """Каталог расчетных листов внутри tmp_path."""
    directory = tmp_path / "payslips"
    directory.mkdir()
    monkeypatch.setattr(settings, "payslips_dir", str(directory))
    return directory


@pytest.fixture
def fake_renderer(payslips_dir):
    return FakePayslipRenderer(str(payslips_dir))


async def add_employee(
    session: AsyncSession,
    code: str = "EMP001",
    name: str = "Test Employee",
    base_salary: str = "50000",
    allowances: str = "5000",
    join_date: date = date(2023, 1, 1),
    pf_applicable: bool = True,
    professional_tax_applicable: bool = True,
    status: EmployeeStatus = EmployeeStatus.ACTIVE,
    role: Role = Role.EMPLOYEE,
) -> Employee:
    """Пользователь и сотрудник одной транзакцией."""
    user = User(email=f"{code.lower()}@workzen.test", name=name, role=role.value)
    employee = Employee(
        user=user,
        employee_code=code,
        department="Engineering",
        designation="Developer",
        base_salary=Decimal(base_salary),
        allowances=Decimal(allowances),
        pf_applicable=pf_applicable,
        professional_tax_applicable=professional_tax_applicable,
        join_date=join_date,
        status=status.value,
    )
    session.add(employee)
    await session.commit()
    return employee


@pytest.fixture
def employee_factory(db_session):
    """Фабрика сотрудников в тестовой БД."""

    async def factory(**kwargs) -> Employee:
        return await add_employee(db_session, **kwargs)

    return factory


# =============================================================================
# Моки для unit тестов
# =============================================================================

@pytest.fixture
def mock_db_session():
    """Мок сессии базы данных для unit тестов"""
    session = AsyncMock(spec=AsyncSession)
    session.execute = AsyncMock()
    session.scalar = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.flush = AsyncMock()
    session.add = MagicMock()
    session.delete = AsyncMock()
    return session


# =============================================================================
# HTTP клиент
# =============================================================================

class ApiContext:
    """Приложение, БД и хелперы для тестов через HTTP."""

    def __init__(self, tmp_path, payslips_dir):
        self.engine = create_async_engine(sqlite_url(tmp_path), poolclass=NullPool)
        self.session_maker = async_sessionmaker(self.engine, class_=AsyncSession, expire_on_commit=False)
        self.renderer = FakePayslipRenderer(str(payslips_dir))
        self.notifier = FakeNotifier()
        asyncio.run(create_tables(self.engine))

        self.app = create_app()
        self.app.dependency_overrides[get_db_session] = self._get_session
        self.app.dependency_overrides[get_payslip_renderer] = lambda: self.renderer
        self.app.dependency_overrides[get_payslip_notifier] = lambda: self.notifier
        self.client = TestClient(self.app)

    async def _get_session(self):
        async with self.session_maker() as session:
            yield session

    def run(self, func, *args, **kwargs):
        """Выполнить async функцию с отдельной сессией: func(session, ...)."""

        async def runner():
            async with self.session_maker() as session:
                return await func(session, *args, **kwargs)

        return asyncio.run(runner())

    def add_employee(self, **kwargs) -> Employee:
        return self.run(add_employee, **kwargs)

    def headers(self, role: Role, user_id: int = 1000, employee_id=None) -> dict:
        token = create_access_token(user_id, role, employee_id=employee_id)
        return {"Authorization": f"Bearer {token}"}

    def close(self):
        self.client.close()
        asyncio.run(self.engine.dispose())


@pytest.fixture
def api(tmp_path, payslips_dir):
    context = ApiContext(tmp_path, payslips_dir)
    yield context
    context.close()
