"""Модель заявки на отпуск."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, utcnow


class TimeOffType(str, Enum):
    """Тип отпуска."""
    SICK = "SICK"
    CASUAL = "CASUAL"
    ANNUAL = "ANNUAL"
    UNPAID = "UNPAID"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"


class TimeOffStatus(str, Enum):
    """Статус заявки. Переходы только из PENDING."""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class TimeOff(Base):
    """Заявка сотрудника на отпуск."""

    __tablename__ = "time_off"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    from_date = Column(Date, nullable=False, index=True)
    to_date = Column(Date, nullable=False, index=True)
    type = Column(String(20), nullable=False, index=True)
    reason = Column(Text, nullable=False)
    status = Column(String(20), nullable=False, default=TimeOffStatus.PENDING.value, index=True)
    approver_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    employee = relationship("Employee", backref="time_off_requests")
    approver = relationship("User")

    def __repr__(self) -> str:
        return f"<TimeOff(id={self.id}, employee_id={self.employee_id}, type='{self.type}', status='{self.status}')>"
