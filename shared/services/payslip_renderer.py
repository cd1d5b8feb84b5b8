"""
Рендеринг расчетных листов в PDF
"""

import asyncio
import os
import time
from datetime import datetime, timezone
from typing import Optional, Protocol
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import cm
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from core.config.settings import settings
from core.logging.logger import logger
from core.utils.money import Number, to_decimal
from domain.entities.employee import Employee
from domain.entities.payrun import Payrun, PayrunLine

FONT_PATHS = [
    '/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf',
    '/usr/share/fonts/truetype/liberation/LiberationSans-Regular.ttf',
    '/System/Library/Fonts/Helvetica.ttc',
    'C:\\Windows\\Fonts\\arial.ttf',
]


class PayslipRenderer(Protocol):
    """Внешний рендерер: пишет документ и возвращает путь к нему."""

    async def render(self, line: PayrunLine, employee: Employee, payrun: Payrun) -> str:
        ...


def payslip_file_name(employee_code: str, timestamp_ms: Optional[int] = None) -> str:
    """Имя файла по коду сотрудника и времени генерации."""
    if timestamp_ms is None:
        timestamp_ms = time.time_ns() // 1_000_000
    return f"payslip_{employee_code}_{timestamp_ms}.pdf"


def format_amount(value: Number) -> str:
    return f"{to_decimal(value):,.2f}"


class ReportlabPayslipRenderer:
    """Генерация PDF расчетного листа через reportlab."""

    def __init__(self, output_dir: Optional[str] = None, company_name: Optional[str] = None):
        self.output_dir = output_dir or settings.payslips_dir
        self.company_name = company_name or settings.company_name
        self.font_name = self.setup_fonts()

    def setup_fonts(self) -> str:
        """Регистрирует TTF шрифт с поддержкой кириллицы, если он есть в системе."""
        if 'DejaVuSans' in pdfmetrics.getRegisteredFontNames():
            return 'DejaVuSans'

        for font_path in FONT_PATHS:
            if os.path.exists(font_path):
                try:
                    pdfmetrics.registerFont(TTFont('DejaVuSans', font_path))
                    logger.debug(f"Registered font from: {font_path}")
                    return 'DejaVuSans'
                except Exception as e:
                    logger.warning(f"Failed to register font {font_path}: {e}")

        logger.warning("No suitable font found, using Helvetica")
        return 'Helvetica'

    async def render(self, line: PayrunLine, employee: Employee, payrun: Payrun) -> str:
        """Пишет PDF в каталог расчетных листов и возвращает путь."""
        file_path = os.path.join(self.output_dir, payslip_file_name(employee.employee_code))
        await asyncio.to_thread(self._build_pdf, file_path, line, employee, payrun)
        logger.info("Payslip rendered", payrun_line_id=line.id, file_path=file_path)
        return file_path

    def _build_pdf(self, file_path: str, line: PayrunLine, employee: Employee, payrun: Payrun) -> None:
        os.makedirs(os.path.dirname(os.path.abspath(file_path)), exist_ok=True)

        doc = SimpleDocTemplate(
            file_path,
            pagesize=A4,
            rightMargin=2*cm,
            leftMargin=2*cm,
            topMargin=2*cm,
            bottomMargin=2*cm,
            title=f"Payslip {employee.employee_code}",
        )

        styles = getSampleStyleSheet()
        title_style = ParagraphStyle(
            'PayslipTitle',
            parent=styles['Heading1'],
            fontSize=18,
            spaceAfter=6,
            alignment=TA_CENTER,
            fontName=self.font_name,
        )
        subtitle_style = ParagraphStyle(
            'PayslipSubtitle',
            parent=styles['Heading2'],
            fontSize=14,
            spaceAfter=16,
            alignment=TA_CENTER,
            fontName=self.font_name,
        )
        normal_style = ParagraphStyle(
            'PayslipNormal',
            parent=styles['Normal'],
            fontSize=11,
            spaceAfter=4,
            alignment=TA_LEFT,
            fontName=self.font_name,
        )
        small_style = ParagraphStyle(
            'PayslipSmall',
            parent=normal_style,
            fontSize=8,
            textColor=colors.grey,
        )

        story = [
            Paragraph(escape(self.company_name), title_style),
            Paragraph("Payslip", subtitle_style),
        ]

        details = [
            ("Employee", employee.display_name),
            ("Employee Code", employee.employee_code),
            ("Department", employee.department or "-"),
            ("Designation", employee.designation or "-"),
            ("Pay Period", f"{payrun.period_start.isoformat()} - {payrun.period_end.isoformat()}"),
        ]
        for label, value in details:
            story.append(Paragraph(f"<b>{label}:</b> {escape(str(value))}", normal_style))
        story.append(Spacer(1, 16))

        rows = [
            ["EARNINGS", ""],
            ["Basic Salary", format_amount(employee.base_salary)],
            ["Allowances", format_amount(employee.allowances or 0)],
            ["Gross Salary", format_amount(line.gross)],
            ["DEDUCTIONS", ""],
            ["Unpaid Leave", format_amount(line.unpaid_deduction)],
            ["PF (Employee)", format_amount(line.pf_employee)],
            ["Professional Tax", format_amount(line.professional_tax)],
            ["Other Deductions", format_amount(line.other_deductions)],
            ["NET PAY", format_amount(line.net)],
        ]
        table = Table(rows, colWidths=[10*cm, 5*cm])
        table.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), self.font_name),
            ('FONTSIZE', (0, 0), (-1, -1), 11),
            ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
            ('BACKGROUND', (0, 0), (-1, 0), colors.lightgrey),
            ('BACKGROUND', (0, 4), (-1, 4), colors.lightgrey),
            ('LINEABOVE', (0, -1), (-1, -1), 1, colors.black),
            ('FONTSIZE', (0, -1), (-1, -1), 13),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
        ]))
        story.append(table)
        story.append(Spacer(1, 16))

        if line.remarks:
            story.append(Paragraph(f"Remarks: {escape(line.remarks)}", normal_style))
            story.append(Spacer(1, 24))

        generated_on = datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')
        story.append(Paragraph("This is a system generated payslip.", small_style))
        story.append(Paragraph(f"Generated on: {generated_on}", small_style))

        doc.build(story)
