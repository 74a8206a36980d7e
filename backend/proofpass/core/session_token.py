"""Session Tokens — issue and validate signed JWTs carrying user identity claims.

Invariants:
    - Claims are exactly {sub: user_id, email, iat, exp}; exp = iat + configured lifetime
    - validate() rejects bad signatures, malformed structure, missing claims and past expiry
    - No server-side session store: a token is valid for its full lifetime once issued
    - Pure: the clock is injected, no IO

Design Decisions:
    - python-jose with HS256 and a single shared secret
    - jose's own exp check disabled: expiry compared against the injected clock
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable

from jose import JWTError, jwt

from proofpass.core.domain_types import UserId
from proofpass.core.errors import InvalidTokenError

_REQUIRED_CLAIMS = ("sub", "email", "iat", "exp")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class SessionClaims:
    """Identity claims embedded in a session token."""
    user_id: UserId
    email: str
    issued_at: datetime
    expires_at: datetime


class SessionTokenIssuer:
    """Signs and verifies session tokens with a shared secret."""

    def __init__(
        self,
        secret_key: str,
        expires_in: timedelta,
        algorithm: str = "HS256",
        clock: Callable[[], datetime] = _utcnow,
    ):
        if not secret_key:
            raise ValueError("secret_key must not be empty")
        self._secret_key = secret_key
        self._expires_in = expires_in
        self._algorithm = algorithm
        self._clock = clock

    def issue(self, user_id: UserId, email: str) -> str:
        issued_at = self._clock().replace(microsecond=0)
        expires_at = issued_at + self._expires_in
        payload = {
            "sub": user_id,
            "email": email,
            "iat": int(issued_at.timestamp()),
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def validate(self, token: str) -> SessionClaims:
        """Verify signature and expiry; return the embedded claims."""
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"verify_exp": False, "verify_iat": False},
            )
        except JWTError as e:
            raise InvalidTokenError(f"decode failed: {e}") from e

        for claim in _REQUIRED_CLAIMS:
            if payload.get(claim) in (None, ""):
                raise InvalidTokenError(f"missing claim '{claim}'")
        try:
            issued_at = datetime.fromtimestamp(int(payload["iat"]), tz=timezone.utc)
            expires_at = datetime.fromtimestamp(int(payload["exp"]), tz=timezone.utc)
        except (TypeError, ValueError) as e:
            raise InvalidTokenError("malformed timestamps") from e

        if expires_at <= self._clock():
            raise InvalidTokenError("token expired")

        return SessionClaims(
            user_id=UserId(str(payload["sub"])),
            email=str(payload["email"]),
            issued_at=issued_at,
            expires_at=expires_at,
        )
