"""SQL One-Time-Code Store — TTL key/value store on the signin_codes table.

Invariants:
    - set_if_absent is one INSERT guarded by the primary key: concurrent callers
      for the same key cannot both succeed
    - get_and_delete is one DELETE ... RETURNING: a stored value is handed out at most once
    - Rows past expires_at are indistinguishable from missing rows
    - Driver failures surface as CollaboratorError("otc_store"); never retried here

Design Decisions:
    - Backed by the application database instead of a separate cache service:
      one less moving part, same atomicity through constraints
    - Owns its sessions (independent of the request's session) so a code is
      consumed even when the surrounding request later fails
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import AsyncContextManager, Callable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.core.errors import CollaboratorError
from proofpass.infrastructure.deadlines import deadline
from proofpass.models.signin_code import SigninCode

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything is written in UTC
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


class SqlOTCStore:
    """OTCStore implementation over SQLAlchemy."""

    COLLABORATOR = "otc_store"

    def __init__(
        self,
        session_factory: SessionFactory,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._session_factory = session_factory
        self._clock = clock

    async def set_if_absent(
        self, key: str, value: str, ttl_seconds: int, timeout: float | None = None,
    ) -> bool:
        now = self._clock()
        async with deadline(self.COLLABORATOR, timeout):
            try:
                async with self._session_factory() as db:
                    await db.execute(
                        delete(SigninCode)
                        .where(SigninCode.key == key)
                        .where(SigninCode.expires_at <= now),
                    )
                    db.add(SigninCode(
                        key=key, value=value,
                        expires_at=now + timedelta(seconds=ttl_seconds),
                    ))
                    try:
                        await db.commit()
                    except IntegrityError:
                        await db.rollback()
                        return False
                    return True
            except SQLAlchemyError as e:
                logger.error(
                    f"OTC store set_if_absent failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, "set_if_absent failed") from e

    async def set_with_ttl(
        self, key: str, value: str, ttl_seconds: int, timeout: float | None = None,
    ) -> None:
        """Unconditional write; replaces any existing value for the key."""
        now = self._clock()
        async with deadline(self.COLLABORATOR, timeout):
            try:
                async with self._session_factory() as db:
                    await db.execute(delete(SigninCode).where(SigninCode.key == key))
                    db.add(SigninCode(
                        key=key, value=value,
                        expires_at=now + timedelta(seconds=ttl_seconds),
                    ))
                    await db.commit()
            except SQLAlchemyError as e:
                logger.error(
                    f"OTC store set_with_ttl failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, "set_with_ttl failed") from e

    async def get_and_delete(
        self, key: str, timeout: float | None = None,
    ) -> str | None:
        async with deadline(self.COLLABORATOR, timeout):
            try:
                async with self._session_factory() as db:
                    result = await db.execute(
                        delete(SigninCode)
                        .where(SigninCode.key == key)
                        .returning(SigninCode.value, SigninCode.expires_at),
                    )
                    row = result.first()
                    await db.commit()
            except SQLAlchemyError as e:
                logger.error(
                    f"OTC store get_and_delete failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, "get_and_delete failed") from e
        if row is None:
            return None
        value, expires_at = row
        if _as_utc(expires_at) <= self._clock():
            return None
        return value

    async def exists(self, key: str, timeout: float | None = None) -> bool:
        async with deadline(self.COLLABORATOR, timeout):
            try:
                async with self._session_factory() as db:
                    result = await db.execute(
                        select(SigninCode.key)
                        .where(SigninCode.key == key)
                        .where(SigninCode.expires_at > self._clock()),
                    )
                    return result.scalar_one_or_none() is not None
            except SQLAlchemyError as e:
                logger.error(
                    f"OTC store exists failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, "exists failed") from e
