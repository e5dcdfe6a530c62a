"""
Verifier: the single place where verification tokens and login credentials
are checked.

- verify_token: consumes an email verification token with one conditional UPDATE
- verify_credentials: checks username / verification state / password, in that order
"""
import datetime as dt
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from bloogle.core.security import dummy_verify, verify_password
from bloogle.models.user import User
from bloogle.services.tokens import utc_now

logger = logging.getLogger("uvicorn.error")

MAX_TOKEN_LENGTH = 128


class TokenOutcome(str, Enum):
    SUCCESS = "success"
    # A token that never existed, expired, or was already consumed all look the same
    NOT_FOUND_OR_EXPIRED = "not_found_or_expired"


class CredentialOutcome(str, Enum):
    SUCCESS = "success"
    USER_NOT_FOUND = "user_not_found"
    ACCOUNT_UNVERIFIED = "account_unverified"
    BAD_SECRET = "bad_secret"


@dataclass
class CredentialResult:
    """
    Result of a credential check

    - user: set for every outcome except USER_NOT_FOUND
    - secret_matches: whether the password was right (also evaluated for unverified accounts,
      so the resend-on-login policy only fires for the real account owner)
    """
    outcome: CredentialOutcome
    user: Optional[User] = None
    secret_matches: bool = False

    @property
    def ok(self) -> bool:
        return self.outcome is CredentialOutcome.SUCCESS


def is_well_formed_token(token: Optional[str]) -> bool:
    return bool(token) and len(token) <= MAX_TOKEN_LENGTH


async def verify_token(token: str, now: Optional[dt.datetime] = None) -> TokenOutcome:
    """
    Consume an email verification token.

    Flips is_verified and clears token + expiry in one conditional UPDATE
    (token matches AND expiry is strictly after now AND not verified yet).
    Two concurrent attempts with the same token can never both succeed:
    the second one matches zero rows.

    Parameters:
    - token: token taken from the verification link
    - now: evaluation instant, defaults to the current UTC time

    Returns:
    - TokenOutcome.SUCCESS or TokenOutcome.NOT_FOUND_OR_EXPIRED
    """
    if not is_well_formed_token(token):
        return TokenOutcome.NOT_FOUND_OR_EXPIRED

    now = now or utc_now()
    updated = await User.filter(
        verification_token=token,
        verification_expires__gt=now,
        is_verified=False,
    ).update(
        is_verified=True,
        verification_token=None,
        verification_expires=None,
    )
    if updated:
        logger.info("[auth] email verified")
        return TokenOutcome.SUCCESS
    return TokenOutcome.NOT_FOUND_OR_EXPIRED


async def verify_credentials(username: str, secret: str) -> CredentialResult:
    """
    Check login credentials.

    Outcomes are evaluated in order: USER_NOT_FOUND, ACCOUNT_UNVERIFIED,
    BAD_SECRET, SUCCESS. The password is only ever compared against the
    stored Argon2 hash.
    """
    user = await User.get_or_none(username=username)
    if user is None:
        dummy_verify()  # Keep a miss as slow as a wrong password
        logger.info("[auth] login failed: unknown user")
        return CredentialResult(CredentialOutcome.USER_NOT_FOUND)

    secret_matches = verify_password(secret, user.password_hash)

    if not user.is_verified:
        logger.info("[auth] login refused: user id=%s is not verified", user.id)
        return CredentialResult(CredentialOutcome.ACCOUNT_UNVERIFIED, user, secret_matches)

    if not secret_matches:
        logger.info("[auth] login failed: bad password for user id=%s", user.id)
        return CredentialResult(CredentialOutcome.BAD_SECRET, user)

    return CredentialResult(CredentialOutcome.SUCCESS, user, True)
