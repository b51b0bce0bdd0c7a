import logging
import smtplib
import ssl
from email.mime.text import MIMEText

from lemon.infrastructure.mail.base import MailData, MailSender
from lemon_config.settings import Settings

logger = logging.getLogger(__name__)


class SmtpMailSender(MailSender):
    """Sends mails through the configured SMTP server."""

    def __init__(self, settings: Settings):
        self._settings = settings

    def _create_message(self, mail: MailData) -> MIMEText:
        msg = MIMEText(mail.body, "plain", "utf-8")
        msg["Subject"] = mail.subject
        msg["From"] = f"{self._settings.smtp_from_name} <{self._settings.smtp_from_email}>"
        msg["To"] = mail.to
        return msg

    def send(self, mail: MailData) -> None:
        settings = self._settings
        message = self._create_message(mail)
        smtp_password = (
            settings.smtp_password.get_secret_value() if settings.smtp_password else ""
        )

        try:
            if settings.smtp_use_tls and not settings.smtp_starttls:
                # Implicit TLS (port 465)
                context = ssl.create_default_context()
                with smtplib.SMTP_SSL(
                    settings.smtp_host,
                    settings.smtp_port,
                    context=context,
                ) as server:
                    if settings.smtp_user:
                        server.login(settings.smtp_user, smtp_password)
                    server.send_message(message)
            else:
                # STARTTLS (port 587) or plain
                with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                    if settings.smtp_starttls:
                        context = ssl.create_default_context()
                        server.starttls(context=context)
                    if settings.smtp_user:
                        server.login(settings.smtp_user, smtp_password)
                    server.send_message(message)

            logger.info("Email sent to %s", mail.to)

        except (smtplib.SMTPException, OSError) as e:
            logger.error("Failed to send email to %s: %s", mail.to, e)
            raise
