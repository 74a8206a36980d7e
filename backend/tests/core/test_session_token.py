"""Session Tokens — issuing and validating signed JWTs.

Tests:
    - issue() then validate() returns the same identity claims
    - Expiry is judged against the injected clock
    - Tampered, foreign-secret and claim-less tokens are rejected as InvalidTokenError
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt

from proofpass.core.errors import InvalidTokenError, UnauthorizedError
from proofpass.core.session_token import SessionTokenIssuer

SECRET = "unit-test-secret"
START = datetime(2026, 1, 1, 9, 30, 15, 123456, tzinfo=timezone.utc)


class _Clock:
    def __init__(self, now):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return _Clock(START)


@pytest.fixture
def issuer(clock):
    return SessionTokenIssuer(SECRET, timedelta(hours=24), clock=clock)


def test_round_trip_preserves_claims(issuer):
    claims = issuer.validate(issuer.issue("user-1", "a@b.com"))
    assert claims.user_id == "user-1"
    assert claims.email == "a@b.com"
    assert claims.issued_at == START.replace(microsecond=0)
    assert claims.expires_at - claims.issued_at == timedelta(hours=24)


def test_token_valid_until_expiry(issuer, clock):
    token = issuer.issue("user-1", "a@b.com")
    clock.now = START + timedelta(hours=23, minutes=59)
    assert issuer.validate(token).user_id == "user-1"


def test_expired_token_rejected(issuer, clock):
    token = issuer.issue("user-1", "a@b.com")
    clock.now = START + timedelta(hours=24, seconds=1)
    with pytest.raises(InvalidTokenError) as exc:
        issuer.validate(token)
    assert exc.value.reason == "token expired"
    assert exc.value.http_status == 401


def test_wrong_secret_rejected(issuer, clock):
    other = SessionTokenIssuer("another-secret", timedelta(hours=1), clock=clock)
    with pytest.raises(InvalidTokenError):
        issuer.validate(other.issue("user-1", "a@b.com"))


def test_tampered_token_rejected(issuer):
    token = issuer.issue("user-1", "a@b.com")
    head, payload, sig = token.split(".")
    tampered = ".".join([head, payload[:-2] + ("AA" if payload[-2:] != "AA" else "BB"), sig])
    with pytest.raises(InvalidTokenError):
        issuer.validate(tampered)


def test_garbage_token_rejected(issuer):
    with pytest.raises(UnauthorizedError):
        issuer.validate("not-a-jwt")


def test_missing_email_claim_rejected(issuer):
    iat = int(START.timestamp())
    token = jwt.encode({"sub": "user-1", "iat": iat, "exp": iat + 60}, SECRET, algorithm="HS256")
    with pytest.raises(InvalidTokenError) as exc:
        issuer.validate(token)
    assert "email" in exc.value.reason


def test_empty_secret_refused():
    with pytest.raises(ValueError):
        SessionTokenIssuer("", timedelta(hours=1))
