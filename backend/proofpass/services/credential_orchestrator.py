"""Credential Orchestrator — checks eligibility and asks the Issuer to sign credentials.

Invariants:
    - Every precondition is checked before the Issuer is contacted; a failed check
      never reaches the Issuer
    - Ticket preconditions, in order: no stored ticket credential for (event, email),
      a registration for (event, email), user exists with an identity commitment,
      event exists with a context id
    - Email preconditions: user exists with an identity commitment; no duplicate guard
    - issued_at/expire_at come from the orchestrator's clock, not from the Issuer response
    - Issuer failures propagate as CollaboratorError / OperationTimeoutError, never retried
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.core.credential_request import (
    SignedCredentialRequest, build_email_request, build_ticket_request,
)
from proofpass.core.errors import (
    ConflictError, ErrorContext, ResourceNotFoundError, ValidationError,
)
from proofpass.core.repository_protocols import IssuerClient
from proofpass.infrastructure.observability import log_context
from proofpass.models.event import Event
from proofpass.models.registration import Registration
from proofpass.models.ticket_credential import TicketCredential
from proofpass.models.user import User

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class IssuedCredential:
    """Unencrypted signed credential handed back to the caller."""
    credential: str
    issued_at: datetime
    expire_at: datetime
    event_id: str | None = None


class CredentialOrchestrator:
    """Builds ticket/email credential requests and submits them to the Issuer."""

    def __init__(
        self,
        db: AsyncSession,
        issuer: IssuerClient,
        *,
        chain_id: int,
        email_context_id: str,
        issuer_timeout: float | None = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.db = db
        self.issuer = issuer
        self.chain_id = chain_id
        self.email_context_id = email_context_id
        self.issuer_timeout = issuer_timeout
        self._clock = clock

    async def request_ticket_credential(
        self, user_id: str, email: str, event_id: str,
    ) -> IssuedCredential:
        log_ctx = log_context(
            "request_ticket_credential", user_id=user_id, email=email, event_id=event_id,
        )
        err_ctx = ErrorContext(
            operation="request_ticket_credential", user_id=user_id, event_id=event_id,
        )

        existing = await self.db.execute(
            select(TicketCredential.id)
            .where(TicketCredential.event_id == event_id)
            .where(TicketCredential.email == email),
        )
        if existing.scalar_one_or_none() is not None:
            logger.info("Ticket credential already stored for this event", extra=log_ctx)
            raise ConflictError(
                "User already has a ticket credential for this event, cannot request again",
                "TICKET_CREDENTIAL_EXISTS", err_ctx,
            )

        registration = await self.db.execute(
            select(Registration.id)
            .where(Registration.event_id == event_id)
            .where(func.lower(Registration.email) == email.lower()),
        )
        if registration.scalar_one_or_none() is None:
            logger.info("No user registration found for this event", extra=log_ctx)
            raise ValidationError(
                "No user registration found for this event", "event_id", err_ctx,
            )

        user = await self._identity_holder(user_id, err_ctx)

        event = (
            await self.db.execute(select(Event).where(Event.id == event_id))
        ).scalar_one_or_none()
        if event is None:
            logger.info("Event not found", extra=log_ctx)
            raise ResourceNotFoundError("Event", event_id, err_ctx)
        if not event.context_id:
            logger.info("Event context id not set", extra=log_ctx)
            raise ValidationError(
                "Event context ID not set, cannot generate ticket credential",
                "context_id", err_ctx,
            )

        request = build_ticket_request(
            event_id=event.id,
            event_context_id=event.context_id,
            email=email,
            identity_commitment=user.identity_commitment,
            chain_id=self.chain_id,
            now=self._clock(),
        )
        issued = await self._submit(request, log_ctx)
        return IssuedCredential(
            credential=issued,
            issued_at=request.issued_at,
            expire_at=request.expire_at,
            event_id=event.id,
        )

    async def request_email_credential(
        self, user_id: str, email: str,
    ) -> IssuedCredential:
        log_ctx = log_context("request_email_credential", user_id=user_id, email=email)
        err_ctx = ErrorContext(operation="request_email_credential", user_id=user_id)

        user = await self._identity_holder(user_id, err_ctx)
        request = build_email_request(
            email_context_id=self.email_context_id,
            email=email,
            identity_commitment=user.identity_commitment,
            chain_id=self.chain_id,
            now=self._clock(),
        )
        issued = await self._submit(request, log_ctx)
        return IssuedCredential(
            credential=issued,
            issued_at=request.issued_at,
            expire_at=request.expire_at,
        )

    async def _identity_holder(self, user_id: str, err_ctx: ErrorContext) -> User:
        """Load the caller and require an identity commitment."""
        user = (
            await self.db.execute(select(User).where(User.id == user_id))
        ).scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError("User", user_id, err_ctx)
        if not user.identity_commitment:
            raise ValidationError(
                "User identity commitment not set, cannot generate credential",
                "identity_commitment", err_ctx,
            )
        return user

    async def _submit(self, request: SignedCredentialRequest, log_ctx: dict) -> str:
        try:
            signed = await self.issuer.generate_signed_credential(
                request, timeout=self.issuer_timeout,
            )
        except Exception:
            logger.error(
                f"Failed to generate {request.purpose.value} credential", extra=log_ctx,
            )
            raise
        logger.info(f"Generated {request.purpose.value} credential", extra=log_ctx)
        return signed
