"""
Service-level tests for the verifier and token re-issue (database-backed).
"""
import datetime as dt

import pytest

from bloogle.core.security import hash_password
from bloogle.models.user import User
from bloogle.services.tokens import issue, reissue
from bloogle.services.verifier import (
    CredentialOutcome,
    TokenOutcome,
    verify_credentials,
    verify_token,
)


pytestmark = pytest.mark.asyncio

NOW = dt.datetime(2026, 1, 15, 12, 0, 0, tzinfo=dt.timezone.utc)


async def _unverified_user(name: str = "carol", password: str = "CarolPass#1", now=NOW) -> tuple[User, str]:
    issued = issue(name, now=now)
    user = await User.create(
        username=name,
        email=f"{name}@example.com",
        password_hash=hash_password(password),
        verification_token=issued.token,
        verification_expires=issued.expires_at,
    )
    return user, issued.token


class TestVerifyToken:
    """Tests for consuming verification tokens."""

    async def test_valid_token_verifies_and_clears(self, db):
        user, token = await _unverified_user()
        outcome = await verify_token(token, now=NOW + dt.timedelta(hours=1))
        assert outcome is TokenOutcome.SUCCESS
        await user.refresh_from_db()
        assert user.is_verified is True
        assert user.verification_token is None
        assert user.verification_expires is None

    async def test_expiry_instant_is_exclusive(self, db):
        user, token = await _unverified_user()
        expiry = NOW + dt.timedelta(hours=24)
        assert await verify_token(token, now=expiry) is TokenOutcome.NOT_FOUND_OR_EXPIRED
        assert await verify_token(token, now=expiry + dt.timedelta(seconds=1)) is TokenOutcome.NOT_FOUND_OR_EXPIRED
        await user.refresh_from_db()
        assert user.is_verified is False
        # One microsecond before the expiry is still fine
        assert await verify_token(token, now=expiry - dt.timedelta(microseconds=1)) is TokenOutcome.SUCCESS

    async def test_unknown_and_malformed_tokens(self, db):
        await _unverified_user()
        assert await verify_token("does-not-exist", now=NOW) is TokenOutcome.NOT_FOUND_OR_EXPIRED
        assert await verify_token("", now=NOW) is TokenOutcome.NOT_FOUND_OR_EXPIRED
        assert await verify_token("x" * 500, now=NOW) is TokenOutcome.NOT_FOUND_OR_EXPIRED

    async def test_second_use_is_not_found(self, db):
        _, token = await _unverified_user()
        assert await verify_token(token, now=NOW) is TokenOutcome.SUCCESS
        assert await verify_token(token, now=NOW) is TokenOutcome.NOT_FOUND_OR_EXPIRED


class TestReissue:
    """Tests for replacing the token of an unverified user."""

    async def test_reissue_overwrites_previous_token(self, db):
        user, old_token = await _unverified_user()
        later = NOW + dt.timedelta(hours=30)
        fresh = await reissue(user, now=later)
        assert fresh is not None
        assert fresh.token != old_token
        assert fresh.expires_at == later + dt.timedelta(hours=24)

        assert await verify_token(old_token, now=later) is TokenOutcome.NOT_FOUND_OR_EXPIRED
        assert await verify_token(fresh.token, now=later) is TokenOutcome.SUCCESS

    async def test_reissue_skips_verified_user(self, db):
        user, token = await _unverified_user()
        await verify_token(token, now=NOW)
        await user.refresh_from_db()
        assert await reissue(user) is None
        await user.refresh_from_db()
        assert user.verification_token is None
        assert user.verification_expires is None


class TestVerifyCredentials:
    """Tests for the ordered login outcomes."""

    async def test_user_not_found(self, db):
        result = await verify_credentials("nobody", "whatever")
        assert result.outcome is CredentialOutcome.USER_NOT_FOUND
        assert result.user is None
        assert not result.ok

    async def test_unverified_is_reported_before_password(self, db):
        await _unverified_user(password="RightPass#1")
        wrong = await verify_credentials("carol", "wrong")
        assert wrong.outcome is CredentialOutcome.ACCOUNT_UNVERIFIED
        assert wrong.secret_matches is False

        right = await verify_credentials("carol", "RightPass#1")
        assert right.outcome is CredentialOutcome.ACCOUNT_UNVERIFIED
        assert right.secret_matches is True
        assert not right.ok

    async def test_bad_secret_and_success(self, db):
        user, token = await _unverified_user(password="RightPass#1")
        await verify_token(token, now=NOW)

        bad = await verify_credentials("carol", "RightPass#2")
        assert bad.outcome is CredentialOutcome.BAD_SECRET

        good = await verify_credentials("carol", "RightPass#1")
        assert good.ok
        assert good.user.id == user.id

    async def test_plaintext_password_in_hash_column_never_matches(self, db):
        await User.create(
            username="legacy",
            email="legacy@example.com",
            password_hash="PlainPass#1",
            is_verified=True,
        )
        result = await verify_credentials("legacy", "PlainPass#1")
        assert result.outcome is CredentialOutcome.BAD_SECRET
