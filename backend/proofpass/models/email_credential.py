"""EmailCredential ORM — a client-encrypted email credential bound to an identity commitment.

Invariants:
    - At most one row per identity_commitment, enforced by a unique constraint
    - data is opaque ciphertext
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from proofpass.db.base import Base


class EmailCredential(Base):
    __tablename__ = "email_credentials"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    identity_commitment: Mapped[str] = mapped_column(
        String(256), nullable=False, unique=True,
    )
    data: Mapped[str] = mapped_column(Text, nullable=False)
    issued_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expire_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
