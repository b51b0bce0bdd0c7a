import asyncio
import logging

from lemon.infrastructure.mail.base import MailData, MailSender

logger = logging.getLogger(__name__)


async def send_mail_quietly(sender: MailSender, mail: MailData) -> bool:
    """Send a mail in a worker thread; failures are logged, never raised.

    Returns True when the sender accepted the mail.
    """
    try:
        await asyncio.to_thread(sender.send, mail)
    except Exception as e:
        logger.error("Failed to send mail to %s: %s", mail.to, e)
        return False
    return True
