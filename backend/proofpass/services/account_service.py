"""Account Service — login, profile, write-once identity and credential storage.

Invariants:
    - login = redeem one-time code, then get-or-create the user, then issue a token
    - New users start with empty identity fields and is_encrypted=True
    - Identity fields are written by one conditional UPDATE that only matches rows where
      all three are still empty; once any is set, further writes fail with ConflictError
    - Stored credential blobs are opaque; the server only binds them to the caller
    - Ticket credentials upsert on (event_id, email); email credentials on identity_commitment
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.core.domain_types import UserId
from proofpass.core.errors import (
    ConflictError, ErrorContext, ResourceNotFoundError, ValidationError,
)
from proofpass.core.one_time_code import normalize_email
from proofpass.core.session_token import SessionTokenIssuer
from proofpass.infrastructure.observability import log_context
from proofpass.models.email_credential import EmailCredential
from proofpass.models.event import Event
from proofpass.models.ticket_credential import TicketCredential
from proofpass.models.user import User
from proofpass.services.otc_authenticator import OTCAuthenticator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    token: str
    user: User
    created: bool


class AccountService:
    """User-facing account operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Login ──────────────────────────────────────────────────

    async def login(
        self,
        email: str,
        code: str,
        authenticator: OTCAuthenticator,
        tokens: SessionTokenIssuer,
    ) -> LoginResult:
        email = normalize_email(email)
        log_ctx = log_context("login", email=email)
        if not code:
            raise ValidationError("Invalid code", "code")

        await authenticator.redeem_code(email, code)

        user, created = await self._get_or_create_user(email)
        token = tokens.issue(UserId(user.id), user.email)
        logger.info(
            "User logged in", extra={**log_ctx, "user_id": user.id},
        )
        return LoginResult(token=token, user=user, created=created)

    async def _get_or_create_user(self, email: str) -> tuple[User, bool]:
        user = await self._user_by_email(email)
        if user is not None:
            return user, False
        user = User(
            email=email,
            identity_commitment="",
            encrypted_identity_secret="",
            encrypted_internal_nullifier="",
            is_encrypted=True,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            # concurrent first login for the same email won the insert
            await self.db.rollback()
            existing = await self._user_by_email(email)
            if existing is None:
                raise
            return existing, False
        logger.info(
            "User not found, created new user",
            extra=log_context("login", email=email, user_id=user.id),
        )
        return user, True

    async def _user_by_email(self, email: str) -> User | None:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    # ─── Profile ────────────────────────────────────────────────

    async def get_user(self, user_id: str) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if user is None:
            raise ResourceNotFoundError(
                "User", user_id, ErrorContext(operation="get_user", user_id=user_id),
            )
        return user

    async def set_identity(
        self,
        user_id: str,
        identity_commitment: str,
        encrypted_identity_secret: str,
        encrypted_internal_nullifier: str,
    ) -> User:
        err_ctx = ErrorContext(operation="set_identity", user_id=user_id)
        result = await self.db.execute(
            update(User)
            .where(User.id == user_id)
            .where(User.identity_commitment == "")
            .where(User.encrypted_identity_secret == "")
            .where(User.encrypted_internal_nullifier == "")
            .values(
                identity_commitment=identity_commitment,
                encrypted_identity_secret=encrypted_identity_secret,
                encrypted_internal_nullifier=encrypted_internal_nullifier,
            ),
        )
        if result.rowcount == 0:
            await self.db.rollback()
            user = await self.get_user(user_id)
            logger.info(
                "Identity fields already set",
                extra=log_context("set_identity", user_id=user.id),
            )
            raise ConflictError(
                "Identity fields have already been set, cannot update again",
                "IDENTITY_ALREADY_SET", err_ctx,
            )
        await self.db.commit()
        user = await self.get_user(user_id)
        await self.db.refresh(user)
        logger.info("Identity fields set", extra=log_context("set_identity", user_id=user_id))
        return user

    # ─── Email credential storage ───────────────────────────────

    async def store_email_credential(
        self, user_id: str, data: str, issued_at: datetime, expire_at: datetime,
    ) -> EmailCredential:
        user = await self.get_user(user_id)
        if not user.identity_commitment:
            raise ValidationError(
                "User identity commitment not set, cannot store email credential",
                "identity_commitment",
                ErrorContext(operation="store_email_credential", user_id=user_id),
            )
        commitment = user.identity_commitment
        stmt = select(EmailCredential).where(
            EmailCredential.identity_commitment == commitment,
        )
        credential = await self._upsert(
            stmt,
            lambda: EmailCredential(identity_commitment=commitment),
            data, issued_at, expire_at,
        )
        logger.info(
            "Stored email credential",
            extra=log_context("store_email_credential", user_id=user_id),
        )
        return credential

    async def get_email_credential(self, user_id: str) -> EmailCredential | None:
        user = await self.get_user(user_id)
        if not user.identity_commitment:
            return None
        result = await self.db.execute(
            select(EmailCredential).where(
                EmailCredential.identity_commitment == user.identity_commitment,
            ),
        )
        return result.scalar_one_or_none()

    # ─── Ticket credential storage ──────────────────────────────

    async def store_ticket_credential(
        self,
        user_id: str,
        email: str,
        event_id: str,
        data: str,
        issued_at: datetime,
        expire_at: datetime,
    ) -> TicketCredential:
        event = await self.db.execute(select(Event.id).where(Event.id == event_id))
        if event.scalar_one_or_none() is None:
            raise ValidationError(
                f"Unknown event '{event_id}'", "event_id",
                ErrorContext(operation="store_ticket_credential", user_id=user_id),
            )
        stmt = (
            select(TicketCredential)
            .where(TicketCredential.event_id == event_id)
            .where(TicketCredential.email == email)
        )
        credential = await self._upsert(
            stmt,
            lambda: TicketCredential(event_id=event_id, email=email),
            data, issued_at, expire_at,
        )
        logger.info(
            "Stored ticket credential",
            extra=log_context(
                "store_ticket_credential", user_id=user_id, event_id=event_id,
            ),
        )
        return credential

    async def list_ticket_credentials(self, email: str) -> list[TicketCredential]:
        result = await self.db.execute(
            select(TicketCredential)
            .where(TicketCredential.email == email)
            .order_by(TicketCredential.created_at.desc()),
        )
        return list(result.scalars().all())

    async def _upsert(self, stmt, factory, data, issued_at, expire_at):
        """Create-or-update by a unique key; a lost insert race becomes an update."""
        for attempt in range(2):
            row = (await self.db.execute(stmt)).scalar_one_or_none()
            if row is None:
                row = factory()
                self.db.add(row)
            row.data = data
            row.issued_at = issued_at
            row.expire_at = expire_at
            try:
                await self.db.commit()
                return row
            except IntegrityError:
                await self.db.rollback()
                if attempt == 1:
                    raise
        raise AssertionError("unreachable")
