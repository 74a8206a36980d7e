"""Event Routes — public event views, admin management, ticket issuance, check-in.

Invariants:
    - Listing and detail are public; create/update/ticket requests need a session token
    - Attendance recording is authorized by the event's admin code, not a session token
    - A body event_id that differs from the path id is rejected (400) before any lookup
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.api.dependencies import (
    get_context_binder, get_credential_orchestrator, require_claims,
)
from proofpass.config import Settings, get_settings
from proofpass.core.domain_types import EventId, Nullifier
from proofpass.core.errors import ErrorContext, ValidationError
from proofpass.core.session_token import SessionClaims
from proofpass.infrastructure.database import get_db
from proofpass.schemas.attendance import RecordAttendanceRequest, RecordAttendanceResponse
from proofpass.schemas.credential import SignedCredentialResponse
from proofpass.schemas.event import EventCreate, EventResponse, EventUpdate
from proofpass.services.attendance_ledger import AttendanceLedger
from proofpass.services.context_binder import ContextBinder
from proofpass.services.credential_orchestrator import CredentialOrchestrator
from proofpass.services.event_service import EventService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/events", tags=["events"])


@router.get("", response_model=list[EventResponse])
async def list_events(db: AsyncSession = Depends(get_db)):
    events = await EventService(db).list_events()
    return [EventResponse.model_validate(e) for e in events]


@router.post(
    "", response_model=EventResponse, status_code=status.HTTP_201_CREATED,
)
async def create_event(
    body: EventCreate,
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
    binder: ContextBinder = Depends(get_context_binder),
    settings: Settings = Depends(get_settings),
):
    """Create an event; the caller becomes its first admin."""
    event = await EventService(db).create_event(
        claims.user_id,
        binder,
        name=body.name,
        description=body.description,
        url=body.url,
        admin_code=body.admin_code,
        start_date=body.start_date,
        end_date=body.end_date,
        chain_id=settings.event_chain_id,
        issuer_key_id=settings.issuer_key_id,
    )
    return EventResponse.model_validate(event)


@router.get("/{event_id}", response_model=EventResponse)
async def get_event(event_id: str, db: AsyncSession = Depends(get_db)):
    event = await EventService(db).get_event(event_id)
    return EventResponse.model_validate(event)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    body: EventUpdate,
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    event = await EventService(db).update_event(
        event_id, claims.user_id, body.model_dump(exclude_unset=True),
    )
    return EventResponse.model_validate(event)


@router.post(
    "/{event_id}/request-ticket-credential",
    response_model=SignedCredentialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_ticket_credential(
    event_id: str,
    claims: SessionClaims = Depends(require_claims),
    orchestrator: CredentialOrchestrator = Depends(get_credential_orchestrator),
):
    issued = await orchestrator.request_ticket_credential(
        claims.user_id, claims.email, event_id,
    )
    return SignedCredentialResponse(
        credential=issued.credential,
        issued_at=issued.issued_at,
        expire_at=issued.expire_at,
        event_id=issued.event_id,
    )


@router.post(
    "/{event_id}/attendance",
    response_model=RecordAttendanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def record_attendance(
    event_id: str,
    body: RecordAttendanceRequest,
    db: AsyncSession = Depends(get_db),
):
    """Record a check-in for a presented credential's nullifier."""
    if body.event_id and body.event_id != event_id:
        raise ValidationError(
            "Body event_id does not match the path", "event_id",
            ErrorContext(operation="record_attendance", event_id=event_id),
        )
    attendance_id = await AttendanceLedger(db).record_attendance(
        EventId(event_id),
        Nullifier(body.nullifier),
        credential_type=body.type,
        credential_context=body.context,
        submitted_admin_code=body.admin_code,
        key_id=body.key_id,
    )
    return RecordAttendanceResponse(attendance_id=attendance_id)
