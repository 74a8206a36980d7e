"""Event ORM — an event that issues ticket credentials and records attendance.

Invariants:
    - context_id and context_string are set at creation and never updated
    - admin_code is the shared secret for attendance recording; never serialized out
    - chain_id and issuer_key_id are copied from settings at creation

Design Decisions:
    - context_id stored as decimal text: uint160 does not fit BIGINT
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from proofpass.db.base import Base


class Event(Base):
    """Event aggregate — owns admins, registrations, attendance."""
    __tablename__ = "events"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String(2048), nullable=False, default="")
    admin_code: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    chain_id: Mapped[str] = mapped_column(String(32), nullable=False, default="1")
    context_id: Mapped[str] = mapped_column(String(80), nullable=False, default="")
    context_string: Mapped[str] = mapped_column(Text, nullable=False, default="")
    issuer_key_id: Mapped[str] = mapped_column(String(66), nullable=False, default="")
    start_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    end_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    admins: Mapped[list["EventAdmin"]] = relationship(
        "EventAdmin", back_populates="event",
        cascade="all, delete-orphan", lazy="selectin",
    )
