"""
Mail Dispatcher Abstract Interface

Provides unified interface for different mail providers (SMTP / console outbox).
The auth flow only builds the message; delivery is the dispatcher's job.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class EmailMessage:
    """Outgoing email"""
    recipient: str
    subject: str
    html_body: str


class MailDispatcher(ABC):
    """Mail Dispatcher Abstract Base Class"""

    @abstractmethod
    async def send(self, message: EmailMessage) -> bool:
        """
        Deliver a message

        Returns:
        - bool: True if the provider accepted the message, False otherwise

        Implementations log failures and never raise for delivery problems;
        callers do not retry.
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Dispatcher name (e.g., "SMTP")"""
        pass
