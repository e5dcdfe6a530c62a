"""
Console mail dispatcher

Development / test provider: logs each message and keeps it in an in-memory outbox.
"""
import logging
from typing import List

from .mail_base import EmailMessage, MailDispatcher

logger = logging.getLogger("uvicorn.error")


class ConsoleMailDispatcher(MailDispatcher):
    def __init__(self):
        self.outbox: List[EmailMessage] = []

    @property
    def name(self) -> str:
        return "Console"

    async def send(self, message: EmailMessage) -> bool:
        self.outbox.append(message)
        logger.info("[mail] (console) to=%s subject=%s", message.recipient, message.subject)
        return True

    def clear(self) -> None:
        self.outbox.clear()


console_mail_dispatcher = ConsoleMailDispatcher()
