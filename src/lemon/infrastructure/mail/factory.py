import logging

from lemon.infrastructure.mail.base import MailSender
from lemon.infrastructure.mail.mock_mail_sender import MockMailSender
from lemon.infrastructure.mail.smtp_mail_sender import SmtpMailSender
from lemon_config.settings import Settings

logger = logging.getLogger(__name__)


def create_mail_sender(settings: Settings) -> MailSender:
    """Pick the SMTP sender for a real host, the mock sender otherwise."""
    if settings.mail_enabled_smtp:
        logger.info("Configuring SmtpMailSender")
        return SmtpMailSender(settings)

    logger.info("Configuring MockMailSender")
    return MockMailSender()
