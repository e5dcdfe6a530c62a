"""
Service-level tests for the session manager and the periodic sweep.
"""
import datetime as dt

import pytest

from bloogle.core.security import sha256_hex
from bloogle.core.scheduler import sweep_sessions_job
from bloogle.models.session import Session
from bloogle.services import sessions


pytestmark = pytest.mark.asyncio

NOW = dt.datetime(2026, 3, 1, 8, 30, 0, tzinfo=dt.timezone.utc)


async def test_establish_and_resolve(create_user):
    user, _ = await create_user()
    handle = await sessions.establish(user, now=NOW)

    record = await Session.get(key_hash=sha256_hex(handle))
    assert record.user_id == user.id
    assert record.expires_at - record.created_at == dt.timedelta(hours=24)

    resolved = await sessions.resolve(handle, now=NOW + dt.timedelta(hours=23))
    assert resolved is not None
    assert resolved.id == user.id


async def test_unverified_user_cannot_bind_session(create_user):
    user, _ = await create_user(verified=False)
    with pytest.raises(ValueError):
        await sessions.establish(user)
    assert await Session.all().count() == 0


async def test_resolve_unknown_or_empty_handle_is_anonymous(db):
    assert await sessions.resolve(None) is None
    assert await sessions.resolve("") is None
    assert await sessions.resolve("unknown-handle") is None
    assert await sessions.resolve("x" * 1000) is None


async def test_expired_session_is_dropped_on_resolve(create_user):
    user, _ = await create_user()
    handle = await sessions.establish(user, now=NOW)

    assert await sessions.resolve(handle, now=NOW + dt.timedelta(hours=24)) is None
    assert await Session.all().count() == 0


async def test_destroy_is_idempotent(create_user):
    user, _ = await create_user()
    handle = await sessions.establish(user, now=NOW)
    other = await sessions.establish(user, now=NOW)

    await sessions.destroy(handle)
    await sessions.destroy(handle)
    await sessions.destroy(None)
    await sessions.destroy("never-issued")

    assert await sessions.resolve(handle, now=NOW) is None
    # Other sessions of the same user are untouched
    assert (await sessions.resolve(other, now=NOW)).id == user.id


async def test_sweep_removes_only_expired(create_user):
    user, _ = await create_user()
    old = await sessions.establish(user, now=NOW - dt.timedelta(hours=30))
    live = await sessions.establish(user, now=NOW)

    removed = await sessions.sweep_expired(now=NOW + dt.timedelta(hours=1))
    assert removed == 1
    assert not await Session.filter(key_hash=sha256_hex(old)).exists()
    assert await Session.filter(key_hash=sha256_hex(live)).exists()


async def test_scheduled_sweep_job(create_user):
    user, _ = await create_user()
    await sessions.establish(user, now=dt.datetime.now(dt.timezone.utc) - dt.timedelta(days=2))
    await sessions.establish(user)

    assert await sweep_sessions_job() == 1
    assert await Session.all().count() == 1
