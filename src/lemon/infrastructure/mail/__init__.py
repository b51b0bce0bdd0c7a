"""Outgoing mail: a pluggable sender plus the account flow templates."""

from lemon.infrastructure.mail.base import MailData, MailSender
from lemon.infrastructure.mail.dispatch import send_mail_quietly
from lemon.infrastructure.mail.factory import create_mail_sender
from lemon.infrastructure.mail.mock_mail_sender import MockMailSender
from lemon.infrastructure.mail.smtp_mail_sender import SmtpMailSender

__all__ = [
    "MailData",
    "MailSender",
    "MockMailSender",
    "SmtpMailSender",
    "create_mail_sender",
    "send_mail_quietly",
]
