"""
Session manager.

Sessions live in the database (Session model) so they survive restarts and
can be revoked. The browser only carries an opaque handle in a cookie; the
database only stores its sha256 digest.
"""
import datetime as dt
import logging
from typing import Optional

from bloogle.config import settings
from bloogle.core.security import new_opaque_token, sha256_hex
from bloogle.models.session import Session
from bloogle.models.user import User
from bloogle.services.tokens import utc_now

logger = logging.getLogger("uvicorn.error")

SESSION_TTL = dt.timedelta(hours=settings.session_ttl_hours)
MAX_HANDLE_LENGTH = 256


def _is_well_formed(handle: Optional[str]) -> bool:
    return bool(handle) and len(handle) <= MAX_HANDLE_LENGTH


async def establish(user: User, now: Optional[dt.datetime] = None) -> str:
    """
    Create a session bound to a verified user.

    Returns:
    - str: opaque handle to send to the browser as the session cookie

    Raises:
    - ValueError: if the user is not verified
    """
    if not user.is_verified:
        raise ValueError("only verified users can start a session")
    now = now or utc_now()
    handle = new_opaque_token()
    await Session.create(
        key_hash=sha256_hex(handle),
        user_id=user.id,
        created_at=now,
        expires_at=now + SESSION_TTL,
    )
    logger.info("[session] established for user id=%s", user.id)
    return handle


async def destroy(handle: Optional[str]) -> None:
    """
    Remove a session server-side. Destroying an unknown or empty handle is not an error.
    """
    if not _is_well_formed(handle):
        return
    deleted = await Session.filter(key_hash=sha256_hex(handle)).delete()
    if deleted:
        logger.info("[session] destroyed")


async def resolve(handle: Optional[str], now: Optional[dt.datetime] = None) -> Optional[User]:
    """
    Map a cookie handle to its user.

    Returns:
    - User bound to a live session, or None (anonymous)

    An expired session found here is deleted on the spot.
    """
    if not _is_well_formed(handle):
        return None
    now = now or utc_now()
    key_hash = sha256_hex(handle)
    session = await Session.filter(key_hash=key_hash).select_related("user").first()
    if session is None:
        return None
    if session.expires_at <= now:
        await Session.filter(key_hash=key_hash).delete()
        logger.info("[session] expired session dropped for user id=%s", session.user_id)
        return None
    return session.user


async def sweep_expired(now: Optional[dt.datetime] = None) -> int:
    """
    Delete every expired session in one statement.

    Returns:
    - int: number of sessions removed
    """
    now = now or utc_now()
    return await Session.filter(expires_at__lte=now).delete()
