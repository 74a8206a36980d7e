"""OTC Authenticator — issues and redeems one-time email sign-in codes.

Invariants:
    - request_code stores the code with a single set-if-absent: a pending code for the
      same email makes the request fail with RateLimitedError, even under concurrency
    - A stored code is bound to exactly one email (the store key)
    - redeem_code consumes the stored code with one get-and-delete BEFORE comparing:
      every code is redeemable at most once, whether or not the guess was right
    - Missing, expired and already-consumed codes are indistinguishable (UnauthorizedError)
    - If delivery fails the pending code is withdrawn so the user may ask again
"""

import logging

from proofpass.core.errors import (
    ErrorContext, ProofPassError, RateLimitedError, UnauthorizedError,
)
from proofpass.core.one_time_code import codes_match, generate_code, signin_code_key
from proofpass.core.repository_protocols import Notifier, OTCStore
from proofpass.infrastructure.observability import log_context

logger = logging.getLogger(__name__)


class OTCAuthenticator:
    """Email one-time-code issuance and redemption."""

    def __init__(
        self,
        store: OTCStore,
        notifier: Notifier,
        ttl_seconds: int = 60,
        timeout: float | None = None,
        code_factory=generate_code,
    ):
        self.store = store
        self.notifier = notifier
        self.ttl_seconds = ttl_seconds
        self.timeout = timeout
        self._code_factory = code_factory

    async def request_code(self, email: str) -> None:
        log_ctx = log_context("request_code", email=email)
        key = signin_code_key(email)
        code = self._code_factory()

        stored = await self.store.set_if_absent(
            key, code, self.ttl_seconds, timeout=self.timeout,
        )
        if not stored:
            logger.info(
                "Code already sent, cannot request again until it expires",
                extra=log_ctx,
            )
            raise RateLimitedError(
                self.ttl_seconds, ErrorContext(operation="request_code"),
            )

        try:
            await self.notifier.send(email, code, timeout=self.timeout)
        except ProofPassError:
            await self.store.get_and_delete(key, timeout=self.timeout)
            logger.error("Failed to deliver sign-in code", extra=log_ctx)
            raise
        logger.info("Sign-in code issued", extra=log_ctx)

    async def redeem_code(self, email: str, submitted_code: str) -> None:
        log_ctx = log_context("redeem_code", email=email)
        stored = await self.store.get_and_delete(
            signin_code_key(email), timeout=self.timeout,
        )
        if stored is None:
            logger.info("Code not found. Invalid login attempt", extra=log_ctx)
            raise UnauthorizedError(
                "Invalid code", "INVALID_CODE", ErrorContext(operation="redeem_code"),
            )
        if not codes_match(stored, submitted_code):
            logger.info("Invalid code, pending code consumed", extra=log_ctx)
            raise UnauthorizedError(
                "Invalid code", "INVALID_CODE", ErrorContext(operation="redeem_code"),
            )
