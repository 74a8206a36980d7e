"""User ORM — an email-authenticated account and its write-once identity fields.

Invariants:
    - email is unique; a user is created on first successful login
    - identity_commitment, encrypted_identity_secret, encrypted_internal_nullifier
      are empty strings until set, and never change once any of them is set
    - Encrypted blobs are opaque to the server
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from proofpass.db.base import Base


class User(Base):
    """Account keyed by email."""
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4()),
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False, unique=True, index=True,
    )
    identity_commitment: Mapped[str] = mapped_column(
        String(256), nullable=False, default="", index=True,
    )
    encrypted_identity_secret: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    encrypted_internal_nullifier: Mapped[str] = mapped_column(
        Text, nullable=False, default="",
    )
    is_encrypted: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
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
