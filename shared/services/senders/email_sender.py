"""Email отправщик уведомлений о расчетных листах."""

import asyncio
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from core.config.settings import settings
from core.logging.logger import logger
from domain.entities.employee import Employee


class EmailPayslipNotifier:
    """Отправщик уведомлений через Email (SMTP)."""

    def __init__(
        self,
        smtp_host: Optional[str] = None,
        smtp_port: Optional[int] = None,
        smtp_user: Optional[str] = None,
        smtp_password: Optional[str] = None,
        smtp_from_email: Optional[str] = None,
        smtp_from_name: Optional[str] = None
    ):
        self.smtp_host = smtp_host or settings.smtp_host
        self.smtp_port = smtp_port or settings.smtp_port
        self.smtp_user = smtp_user or settings.smtp_user
        self.smtp_password = smtp_password or settings.smtp_password
        self.smtp_from_email = smtp_from_email or settings.smtp_from_email or self.smtp_user
        self.smtp_from_name = smtp_from_name or settings.smtp_from_name
        self.smtp_use_tls = settings.smtp_use_tls
        self.smtp_timeout = settings.smtp_timeout

        if not self._is_configured():
            logger.warning("Email sender not fully configured (missing SMTP credentials)")

    def _is_configured(self) -> bool:
        return all([self.smtp_host, self.smtp_user, self.smtp_password, self.smtp_from_email])

    async def notify(self, employee: Employee, payslip_id: int) -> bool:
        """
        Письмо сотруднику о готовом расчетном листе.

        Returns:
            True если письмо ушло, False если отправка не настроена.
            Ошибки SMTP пробрасываются вызывающему.
        """
        if not self._is_configured():
            logger.warning("Email sender is not configured, skipping", employee_id=employee.id)
            return False

        to_email = employee.user.email if employee.user else None
        if not to_email:
            logger.warning("Employee has no email", employee_id=employee.id)
            return False

        message = self._create_email_message(employee, to_email, payslip_id)
        await asyncio.to_thread(self._send, to_email, message)

        logger.info("Payslip email sent", employee_id=employee.id, payslip_id=payslip_id)
        return True

    def _create_email_message(self, employee: Employee, to_email: str, payslip_id: int) -> MIMEMultipart:
        message = MIMEMultipart("alternative")
        message["Subject"] = "Your payslip is ready"
        message["From"] = f"{self.smtp_from_name} <{self.smtp_from_email}>"
        message["To"] = to_email

        body = (
            f"Hello {employee.display_name},\n\n"
            f"Your payslip #{payslip_id} has been generated and is available in {settings.company_name}.\n\n"
            "This is an automated message, please do not reply."
        )
        message.attach(MIMEText(body, "plain", "utf-8"))
        return message

    def _send(self, to_email: str, message: MIMEMultipart) -> None:
        with smtplib.SMTP(self.smtp_host, self.smtp_port, timeout=self.smtp_timeout) as server:
            if self.smtp_use_tls:
                server.starttls()
            server.login(self.smtp_user, self.smtp_password)
            server.sendmail(self.smtp_from_email, [to_email], message.as_string())


_email_sender: Optional[EmailPayslipNotifier] = None


def get_email_sender() -> EmailPayslipNotifier:
    """Получение глобального экземпляра отправщика."""
    global _email_sender
    if _email_sender is None:
        _email_sender = EmailPayslipNotifier()
    return _email_sender
