"""Event Service — event listing, creation and admin-only updates.

Invariants:
    - A new event's id is generated before its context is derived: the context
      string embeds the id
    - The event row and the creator's EventAdmin row are committed together
    - Updates require an EventAdmin row for (event_id, caller); context_id and
      context_string are never changed after creation
"""

import logging
import uuid
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.core.domain_types import EventId
from proofpass.core.errors import ErrorContext, ResourceNotFoundError, UnauthorizedError
from proofpass.infrastructure.observability import log_context
from proofpass.models.event import Event
from proofpass.models.event_admin import EventAdmin
from proofpass.services.context_binder import ContextBinder

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "url", "admin_code", "start_date", "end_date")


class EventService:
    """Event CRUD with admin authorization."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_events(self) -> list[Event]:
        result = await self.db.execute(select(Event).order_by(Event.start_date.desc()))
        return list(result.scalars().all())

    async def get_event(self, event_id: str) -> Event:
        result = await self.db.execute(select(Event).where(Event.id == event_id))
        event = result.scalar_one_or_none()
        if event is None:
            raise ResourceNotFoundError(
                "Event", event_id, ErrorContext(operation="get_event", event_id=event_id),
            )
        return event

    async def create_event(
        self,
        creator_id: str,
        binder: ContextBinder,
        *,
        name: str,
        description: str,
        url: str,
        admin_code: str,
        start_date: datetime,
        end_date: datetime,
        chain_id: str,
        issuer_key_id: str,
    ) -> Event:
        event_id = EventId(str(uuid.uuid4()))
        bound = await binder.derive_context_id(event_id, name)

        event = Event(
            id=event_id,
            name=name,
            description=description,
            url=url,
            admin_code=admin_code,
            chain_id=chain_id,
            context_id=bound.context_id,
            context_string=bound.context_string,
            issuer_key_id=issuer_key_id,
            start_date=start_date,
            end_date=end_date,
        )
        event.admins.append(EventAdmin(user_id=creator_id))
        self.db.add(event)
        await self.db.commit()
        await self.db.refresh(event)
        logger.info(
            "Event created",
            extra=log_context("create_event", event_id=event_id, user_id=creator_id),
        )
        return event

    async def update_event(self, event_id: str, user_id: str, changes: dict) -> Event:
        event = await self.get_event(event_id)

        admin = await self.db.execute(
            select(EventAdmin)
            .where(EventAdmin.event_id == event_id)
            .where(EventAdmin.user_id == user_id),
        )
        if admin.scalar_one_or_none() is None:
            logger.info(
                "Caller is not an admin of this event",
                extra=log_context("update_event", event_id=event_id, user_id=user_id),
            )
            raise UnauthorizedError(
                "Not an admin of this event", "NOT_EVENT_ADMIN",
                ErrorContext(operation="update_event", user_id=user_id, event_id=event_id),
            )

        for name in UPDATABLE_FIELDS:
            if changes.get(name) is not None:
                setattr(event, name, changes[name])
        await self.db.commit()
        await self.db.refresh(event)
        logger.info(
            "Event updated",
            extra=log_context("update_event", event_id=event_id, user_id=user_id),
        )
        return event
