"""Attendance Ledger — validates attendance claims and records each nullifier once per event.

Invariants:
    - Steps run in order: event lookup, admin code, credential type, credential context, insert
    - Nothing is written unless every check passed
    - The (event_id, nullifier) unique constraint is the only duplicate guard: the insert
      either creates the row or raises AlreadyRecordedError; there is no read-before-insert
    - Recorded attendance is terminal (Unseen -> Recorded), never updated or deleted

Design Decisions:
    - Issuer-identity verification of the presented credential is not performed yet;
      key_id is accepted and logged so it can be checked once a trust store exists
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.core.domain_types import AttendanceId, EventId, Nullifier
from proofpass.core.enforce_attendance import validate_attendance_claim
from proofpass.core.errors import (
    AlreadyRecordedError, ErrorContext, ProofPassError, ResourceNotFoundError,
)
from proofpass.infrastructure.observability import log_context
from proofpass.models.attendance import Attendance
from proofpass.models.event import Event

logger = logging.getLogger(__name__)


class AttendanceLedger:
    """Per-event attendance recording with storage-enforced anti-replay."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def record_attendance(
        self,
        event_id: EventId,
        nullifier: Nullifier,
        credential_type: str,
        credential_context: str,
        submitted_admin_code: str,
        key_id: str | None = None,
    ) -> AttendanceId:
        log_ctx = log_context(
            "record_attendance", event_id=event_id, nullifier=nullifier, key_id=key_id,
        )
        err_ctx = ErrorContext(operation="record_attendance", event_id=event_id)

        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            logger.info("Event not found", extra=log_ctx)
            raise ResourceNotFoundError("Event", event_id, err_ctx)

        try:
            validate_attendance_claim(
                event_admin_code=event.admin_code,
                event_context_id=event.context_id,
                submitted_admin_code=submitted_admin_code,
                credential_type=credential_type,
                credential_context=credential_context,
                context=err_ctx,
            )
        except ProofPassError as e:
            logger.info(e.message, extra=log_ctx)
            raise

        attendance = Attendance(event_id=event.id, nullifier=nullifier)
        self.db.add(attendance)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            logger.info("Nullifier already recorded for event", extra=log_ctx)
            raise AlreadyRecordedError(err_ctx)

        logger.info(
            "Recorded attendance",
            extra={**log_ctx, "attendance_id": attendance.id},
        )
        return AttendanceId(attendance.id)
