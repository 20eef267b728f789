from datetime import datetime, timedelta

import pytest
from jose import jwt

from app.services.errors import InvalidToken
from app.services.token_codec import TokenCodec
from app.utils.clock import utcnow

from conftest import FrozenClock

SECRET = "0123456789abcdef0123456789abcdef0123456789abcdef0123456789abcdef"


def test_access_token_round_trip_carries_user_and_email():
    codec = TokenCodec(SECRET)

    token = codec.issue_access_token("user-1", "saver@example.com")
    claims = codec.verify_access_token(token)

    assert claims.user_id == "user-1"
    assert claims.email == "saver@example.com"
    assert claims.expires_at - claims.issued_at == timedelta(minutes=15)


def test_expired_access_token_is_rejected():
    issued_long_ago = TokenCodec(SECRET, clock=lambda: utcnow() - timedelta(hours=1))
    token = issued_long_ago.issue_access_token("user-1", "saver@example.com")

    with pytest.raises(InvalidToken):
        TokenCodec(SECRET).verify_access_token(token)


def test_token_signed_with_other_secret_is_rejected():
    token = TokenCodec("f" * 16 + SECRET).issue_access_token("user-1", "saver@example.com")

    with pytest.raises(InvalidToken):
        TokenCodec(SECRET).verify_access_token(token)


@pytest.mark.parametrize("token", ["", "not-a-jwt", "a.b.c"])
def test_malformed_token_is_rejected(token):
    with pytest.raises(InvalidToken):
        TokenCodec(SECRET).verify_access_token(token)


def test_non_access_token_type_is_rejected():
    now = utcnow()
    token = jwt.encode(
        {"sub": "user-1", "email": "saver@example.com", "type": "refresh", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidToken, match="type"):
        TokenCodec(SECRET).verify_access_token(token)


def test_token_without_email_is_rejected():
    now = utcnow()
    token = jwt.encode(
        {"sub": "user-1", "type": "access", "iat": now, "exp": now + timedelta(minutes=5)},
        SECRET,
        algorithm="HS256",
    )

    with pytest.raises(InvalidToken, match="payload"):
        TokenCodec(SECRET).verify_access_token(token)


def test_refresh_secrets_are_long_random_hex():
    codec = TokenCodec(SECRET)

    secrets = {codec.issue_refresh_secret() for _ in range(200)}

    assert len(secrets) == 200
    for secret in secrets:
        assert len(secret) == 128
        int(secret, 16)


def test_refresh_expiry_is_thirty_days_from_clock():
    fixed = utcnow()
    codec = TokenCodec(SECRET, clock=lambda: fixed)

    assert codec.refresh_expiry() == fixed + timedelta(days=30)


def test_access_token_expires_on_the_injected_clock():
    clock = FrozenClock()
    codec = TokenCodec(SECRET, clock=clock)
    token = codec.issue_access_token("user-1", "saver@example.com")

    clock.advance(minutes=14, seconds=59)
    assert codec.verify_access_token(token).user_id == "user-1"

    clock.advance(seconds=1)
    with pytest.raises(InvalidToken):
        codec.verify_access_token(token)

    clock.advance(minutes=1)
    with pytest.raises(InvalidToken):
        codec.verify_access_token(token)


def test_access_token_issued_under_a_past_clock_verifies_at_that_instant():
    clock = FrozenClock(datetime(2024, 1, 1, 12, 0))
    codec = TokenCodec(SECRET, clock=clock)

    claims = codec.verify_access_token(codec.issue_access_token("user-1", "saver@example.com"))

    assert claims.issued_at == datetime(2024, 1, 1, 12, 0)
    assert claims.expires_at == datetime(2024, 1, 1, 12, 15)
