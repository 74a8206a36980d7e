"""TicketCredential ORM — a client-encrypted ticket credential held for its owner.

Invariants:
    - At most one row per (event_id, email), enforced by a unique constraint
    - data is ciphertext produced by the client; the server never decrypts it
    - issued_at/expire_at are whatever the client stored
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from proofpass.db.base import Base


class TicketCredential(Base):
    __tablename__ = "ticket_credentials"
    __table_args__ = (
        UniqueConstraint(
            "event_id", "email", name="uq_ticket_credentials_event_email",
        ),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(String(320), nullable=False, index=True)
    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), nullable=False,
    )
    data: Mapped[str] = mapped_column(Text, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expire_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
