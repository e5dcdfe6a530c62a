"""
Unit tests for services.tokens module.
"""
import datetime as dt

from bloogle.services.tokens import VERIFY_TOKEN_TTL, issue, utc_now


def test_ttl_is_24_hours():
    assert VERIFY_TOKEN_TTL == dt.timedelta(hours=24)


def test_issue_expires_exactly_one_ttl_after_now():
    now = dt.datetime(2024, 1, 1, 12, 0, tzinfo=dt.timezone.utc)
    issued = issue("alice", now=now)
    assert issued.expires_at == dt.datetime(2024, 1, 2, 12, 0, tzinfo=dt.timezone.utc)


def test_issue_defaults_to_current_time():
    before = utc_now()
    issued = issue("alice")
    after = utc_now()
    assert before + VERIFY_TOKEN_TTL <= issued.expires_at <= after + VERIFY_TOKEN_TTL


def test_each_issue_gives_a_new_token():
    now = utc_now()
    first = issue("alice", now=now)
    second = issue("alice", now=now)
    assert first.token != second.token
    assert len(first.token) >= 43


def test_utc_now_is_timezone_aware():
    assert utc_now().tzinfo is not None
    assert utc_now().utcoffset() == dt.timedelta(0)
