"""
SMTP mail dispatcher

Sends HTML mail through an SMTP server (implicit TLS on port 465, STARTTLS otherwise).
smtplib is blocking, so delivery runs in a worker thread.
"""
import asyncio
import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from bloogle.config import settings
from .mail_base import EmailMessage, MailDispatcher

logger = logging.getLogger("uvicorn.error")


class SmtpMailDispatcher(MailDispatcher):
    """SMTP implementation of MailDispatcher"""

    def __init__(
        self,
        host: str,
        port: int,
        user: str | None,
        password: str | None,
        sender: str,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.sender = sender
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "SMTP"

    def is_available(self) -> bool:
        return bool(self.user and self.password)

    def _build_mime(self, message: EmailMessage) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = self.sender
        mime["To"] = message.recipient
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.html_body, "html", "utf-8"))
        return mime

    def _deliver(self, mime: MIMEMultipart) -> None:
        if self.port == 465:
            with smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout) as server:
                server.login(self.user, self.password)
                server.send_message(mime)
        else:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as server:
                server.starttls()
                server.login(self.user, self.password)
                server.send_message(mime)

    async def send(self, message: EmailMessage) -> bool:
        if not self.is_available():
            logger.error("[mail] SMTP credentials are not configured; message to %s dropped",
                         message.recipient)
            return False
        try:
            await asyncio.to_thread(self._deliver, self._build_mime(message))
        except (smtplib.SMTPException, OSError) as e:
            logger.error("[mail] SMTP delivery to %s failed: %s", message.recipient, e)
            return False
        logger.info("[mail] sent '%s' to %s", message.subject, message.recipient)
        return True


smtp_mail_dispatcher = SmtpMailDispatcher(
    host=settings.smtp_host,
    port=settings.smtp_port,
    user=settings.smtp_user,
    password=settings.smtp_password,
    sender=settings.mail_from,
    timeout=settings.smtp_timeout_sec,
)
