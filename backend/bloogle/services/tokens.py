"""
Email verification token issuer.

A verification token is not a table of its own: it is the
(verification_token, verification_expires) pair stored on the User row.
Issuing a new pair overwrites the previous one, so at most one token is
valid per user at any time.
"""
import datetime as dt
import logging
from dataclasses import dataclass
from typing import Optional

from bloogle.config import settings
from bloogle.core.security import new_opaque_token
from bloogle.models.user import User

logger = logging.getLogger("uvicorn.error")

VERIFY_TOKEN_TTL = dt.timedelta(hours=settings.verify_token_ttl_hours)


def utc_now() -> dt.datetime:
    """
    Get current UTC datetime with timezone information.

    Returns:
        dt.datetime: Current UTC datetime with timezone awareness
    """
    return dt.datetime.now(dt.timezone.utc)


@dataclass(frozen=True)
class IssuedToken:
    """Token plus the absolute instant after which it is no longer accepted"""
    token: str
    expires_at: dt.datetime


def issue(user_identity: str, now: Optional[dt.datetime] = None) -> IssuedToken:
    """
    Create a fresh verification token for an account that is not verified yet.

    Parameters:
    - user_identity: username the token is meant for (only used for logging)
    - now: issue instant, defaults to the current UTC time

    Returns:
    - IssuedToken: random URL-safe token (256 bits) and expiry = now + VERIFY_TOKEN_TTL

    The caller persists the pair on the User row.
    """
    issued_at = now or utc_now()
    logger.debug("[tokens] issued verification token for %s", user_identity)
    return IssuedToken(token=new_opaque_token(), expires_at=issued_at + VERIFY_TOKEN_TTL)


async def reissue(user: User, now: Optional[dt.datetime] = None) -> Optional[IssuedToken]:
    """
    Replace the stored token of an unverified user with a new one.

    Single UPDATE guarded by is_verified=False, so a user who got verified in
    the meantime keeps a clean (token-less) row.

    Returns:
    - IssuedToken if the row was updated, None if the user is already verified
    """
    fresh = issue(user.username, now=now)
    updated = await User.filter(id=user.id, is_verified=False).update(
        verification_token=fresh.token,
        verification_expires=fresh.expires_at,
    )
    if not updated:
        return None
    user.verification_token = fresh.token
    user.verification_expires = fresh.expires_at
    return fresh
