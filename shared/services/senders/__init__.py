"""Отправщики уведомлений."""

from .email_sender import EmailPayslipNotifier, get_email_sender

__all__ = [
    "EmailPayslipNotifier",
    "get_email_sender",
]
