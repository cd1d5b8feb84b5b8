"""Модели расчета зарплаты: ведомость и ее строки."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, utcnow


class PayrunStatus(str, Enum):
    """Статус ведомости."""
    DRAFT = "DRAFT"
    FINALIZED = "FINALIZED"


class Payrun(Base):
    """Неизменяемый снимок расчета зарплаты за период."""

    __tablename__ = "payruns"
    __table_args__ = (
        UniqueConstraint("period_start", "period_end", name="uq_payruns_period"),
    )

    id = Column(Integer, primary_key=True, index=True)
    period_start = Column(Date, nullable=False, index=True)
    period_end = Column(Date, nullable=False, index=True)
    status = Column(String(20), nullable=False, default=PayrunStatus.FINALIZED.value, index=True)

    # Итоги, равны сумме строк на момент создания
    total_gross = Column(Numeric(14, 2), nullable=False)
    total_deductions = Column(Numeric(14, 2), nullable=False)
    total_net = Column(Numeric(14, 2), nullable=False)

    created_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    lines = relationship(
        "PayrunLine",
        back_populates="payrun",
        cascade="all, delete-orphan",
        order_by="PayrunLine.id",
    )

    def __repr__(self) -> str:
        return f"<Payrun(id={self.id}, period={self.period_start}..{self.period_end}, status='{self.status}')>"

    @property
    def is_finalized(self) -> bool:
        return self.status == PayrunStatus.FINALIZED.value


class PayrunLine(Base):
    """Результат расчета по одному сотруднику внутри ведомости."""

    __tablename__ = "payrun_lines"

    id = Column(Integer, primary_key=True, index=True)
    payrun_id = Column(Integer, ForeignKey("payruns.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)

    gross = Column(Numeric(12, 2), nullable=False)
    unpaid_deduction = Column(Numeric(12, 2), nullable=False, default=0)
    pf_employee = Column(Numeric(12, 2), nullable=False, default=0)
    professional_tax = Column(Numeric(12, 2), nullable=False, default=0)
    other_deductions = Column(Numeric(12, 2), nullable=False, default=0)
    net = Column(Numeric(12, 2), nullable=False)

    remarks = Column(Text, nullable=True)  # "Working Days: N, Unpaid Days: M"

    # Relationships
    payrun = relationship("Payrun", back_populates="lines")
    employee = relationship("Employee")
    payslip = relationship("Payslip", back_populates="payrun_line", uselist=False, cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<PayrunLine(id={self.id}, payrun_id={self.payrun_id}, employee_id={self.employee_id}, net={self.net})>"

    @property
    def total_deductions(self):
        return self.unpaid_deduction + self.pf_employee + self.professional_tax + self.other_deductions
