"""Модель сотрудника."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, ForeignKey, Numeric, CheckConstraint
from sqlalchemy.orm import backref, relationship
from sqlalchemy.sql import func

from .base import Base, utcnow


class EmployeeStatus(str, Enum):
    """Статус сотрудника."""
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class Employee(Base):
    """Сотрудник с настройками оплаты."""

    __tablename__ = "employees"
    __table_args__ = (
        CheckConstraint("base_salary >= 0", name="ck_employees_base_salary_non_negative"),
        CheckConstraint("allowances >= 0", name="ck_employees_allowances_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    employee_code = Column(String(50), nullable=False, unique=True, index=True)
    department = Column(String(100), nullable=True)
    designation = Column(String(100), nullable=True)

    # Оплата
    base_salary = Column(Numeric(12, 2), nullable=False)
    allowances = Column(Numeric(12, 2), nullable=False, default=0)
    pf_applicable = Column(Boolean, nullable=False, default=True)
    professional_tax_applicable = Column(Boolean, nullable=False, default=True)

    join_date = Column(Date, nullable=False, index=True)
    bank_details = Column(String(100), nullable=True)  # Хранится в маскированном виде
    status = Column(String(20), nullable=False, default=EmployeeStatus.ACTIVE.value, index=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=True)

    # Relationships
    user = relationship("User", backref=backref("employee", uselist=False))

    def __repr__(self) -> str:
        return f"<Employee(id={self.id}, code='{self.employee_code}')>"

    @property
    def display_name(self) -> str:
        """Имя для отчетов и расчетных листов."""
        if self.user is not None:
            return self.user.name
        return self.employee_code
