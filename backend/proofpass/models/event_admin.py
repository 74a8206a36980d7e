"""EventAdmin ORM — grants a user authority over one event.

Invariants:
    - (event_id, user_id) is the primary key: one grant per pair
    - Created together with the event for its creator; no deletion path
"""

from datetime import datetime, timezone

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from proofpass.db.base import Base


class EventAdmin(Base):
    __tablename__ = "event_admins"

    event_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("events.id"), primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id"), primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    event: Mapped["Event"] = relationship("Event", back_populates="admins")
