"""Модель расчетного листа."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .base import Base, utcnow


class Payslip(Base):
    """Сгенерированный PDF по строке ведомости."""

    __tablename__ = "payslips"

    id = Column(Integer, primary_key=True, index=True)
    payrun_line_id = Column(
        Integer, ForeignKey("payrun_lines.id", ondelete="CASCADE"), nullable=False, unique=True, index=True
    )
    file_path = Column(String(500), nullable=False)
    generated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

    # Relationships
    payrun_line = relationship("PayrunLine", back_populates="payslip")

    def __repr__(self) -> str:
        return f"<Payslip(id={self.id}, payrun_line_id={self.payrun_line_id})>"
