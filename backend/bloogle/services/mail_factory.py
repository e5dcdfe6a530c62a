"""
Mail Dispatcher Factory

Picks the provider from MAIL_PROVIDER ("smtp" or "console") and builds the
verification email.
"""
import html
import logging

from bloogle.config import settings
from bloogle.models.user import User
from .mail_base import EmailMessage, MailDispatcher
from .mail_console import console_mail_dispatcher
from .mail_smtp import smtp_mail_dispatcher

logger = logging.getLogger("uvicorn.error")

VERIFY_SUBJECT = "Verify your Bloogle account"


def get_mail_dispatcher() -> MailDispatcher:
    """
    Get mail dispatcher

    Returns:
    - MailDispatcher: SMTP dispatcher when MAIL_PROVIDER=smtp, console outbox otherwise
    """
    if settings.mail_provider == "smtp":
        return smtp_mail_dispatcher
    if settings.mail_provider != "console":
        logger.warning("[mail] unknown MAIL_PROVIDER=%s, falling back to console", settings.mail_provider)
    return console_mail_dispatcher


def verification_link(token: str) -> str:
    return f"{settings.base_url}/verify/{token}"


def build_verification_email(username: str, email: str, token: str) -> EmailMessage:
    """
    Build the verification email for a freshly issued token.

    Parameters:
    - username: shown in the greeting (HTML-escaped)
    - email: recipient address
    - token: verification token placed in the link
    """
    link = verification_link(token)
    hours = settings.verify_token_ttl_hours
    body = f"""
    <p>Dear <strong>{html.escape(username)}</strong>,</p>

    <p>Welcome to <strong>Bloogle</strong>.</p>

    <p>
      Thank you for signing up. Please verify your email address by clicking the link below:
    </p>

    <p style="margin:16px 0;">
      <a href="{link}"
         style="padding:10px 16px;
                background:#112d42;
                color:#ffffff;
                text-decoration:none;
                border-radius:6px;">
        Verify Email
      </a>
    </p>

    <p>
      <strong>This link is valid for {hours} hours.</strong><br>
      If it expires, you can request a new one from the login page.
    </p>

    <p>
      If you did not create this account, you can safely ignore this email.
    </p>

    <br>
    <p>Regards,<br><strong>Team Bloogle</strong></p>
    """
    return EmailMessage(recipient=email, subject=VERIFY_SUBJECT, html_body=body)


async def send_verification_email(user: User, token: str) -> bool:
    """
    Send the verification link to a user.

    Returns:
    - bool: dispatcher result; failures are logged and not retried
    """
    dispatcher = get_mail_dispatcher()
    ok = await dispatcher.send(build_verification_email(user.username, user.email, token))
    if not ok:
        logger.warning("[mail] verification email for user id=%s was not sent (%s)",
                       user.id, dispatcher.name)
    return ok
