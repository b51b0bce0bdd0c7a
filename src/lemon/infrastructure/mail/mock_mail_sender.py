import logging
from collections import deque

from lemon.infrastructure.mail.base import MailData, MailSender

logger = logging.getLogger(__name__)


class MockMailSender(MailSender):
    """Logs mails instead of sending them.

    Used when no SMTP host is configured. The most recent mails are kept
    in ``sent`` so tests and local setups can pick up links and codes;
    older ones are dropped once ``max_kept`` is reached.
    """

    DEFAULT_MAX_KEPT = 100

    def __init__(self, max_kept: int = DEFAULT_MAX_KEPT) -> None:
        self.sent: deque[MailData] = deque(maxlen=max_kept)

    def send(self, mail: MailData) -> None:
        self.sent.append(mail)
        logger.info(
            "Sending mail to %s\nSubject: %s\n\n%s",
            mail.to,
            mail.subject,
            mail.body,
        )
