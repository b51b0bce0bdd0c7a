"""Mail sender contract."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class MailData:
    """A plain-text mail, ready to send."""

    to: str
    subject: str
    body: str


class MailSender(ABC):
    """Sends mails. Implementations block; call them off the event loop."""

    @abstractmethod
    def send(self, mail: MailData) -> None:
        """Send one mail, raising on transport failure."""
