"""Модель отметки посещаемости."""

from enum import Enum

from sqlalchemy import Column, Integer, String, Date, DateTime, ForeignKey, Numeric, UniqueConstraint
from sqlalchemy.orm import relationship

from .base import Base


class AttendanceStatus(str, Enum):
    """Статус дня. Для расчета зарплаты важен только ABSENT."""
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    HALF_DAY = "HALF_DAY"
    COMPLETED = "COMPLETED"


class Attendance(Base):
    """Приход/уход сотрудника за один день."""

    __tablename__ = "attendance"
    __table_args__ = (
        UniqueConstraint("employee_id", "date", name="uq_attendance_employee_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False, index=True)
    check_in = Column(DateTime(timezone=True), nullable=True)
    check_out = Column(DateTime(timezone=True), nullable=True)
    total_hours = Column(Numeric(5, 2), nullable=True)
    status = Column(String(20), nullable=False, default=AttendanceStatus.PRESENT.value, index=True)

    # Relationships
    employee = relationship("Employee", backref="attendance_records")

    def __repr__(self) -> str:
        return f"<Attendance(id={self.id}, employee_id={self.employee_id}, date={self.date}, status='{self.status}')>"
