"""
Services Module

Provides the authentication core and its collaborators:
- Token issuer: email verification tokens
- Verifier: verification tokens and login credentials
- Session manager: server-side login sessions
- Mail: verification email delivery (SMTP / console outbox)
- Images and saved posts
"""

# Auth core
from .tokens import IssuedToken, issue, reissue, utc_now
from .verifier import (
    CredentialOutcome,
    CredentialResult,
    TokenOutcome,
    verify_credentials,
    verify_token,
)
from . import sessions

# Mail
from .mail_base import EmailMessage, MailDispatcher
from .mail_factory import (
    build_verification_email,
    get_mail_dispatcher,
    send_verification_email,
)
from .mail_console import console_mail_dispatcher
from .mail_smtp import smtp_mail_dispatcher

# Images and bookmarks
from .images import InvalidUpload, image_from_upload, store_image
from . import saves

__all__ = [
    # Auth core
    "IssuedToken",
    "issue",
    "reissue",
    "utc_now",
    "CredentialOutcome",
    "CredentialResult",
    "TokenOutcome",
    "verify_credentials",
    "verify_token",
    "sessions",
    # Mail
    "EmailMessage",
    "MailDispatcher",
    "build_verification_email",
    "get_mail_dispatcher",
    "send_verification_email",
    "console_mail_dispatcher",
    "smtp_mail_dispatcher",
    # Images and bookmarks
    "InvalidUpload",
    "image_from_upload",
    "store_image",
    "saves",
]
