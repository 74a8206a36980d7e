"""SigninCode ORM — TTL-bounded key/value rows backing the one-time-code store.

Invariants:
    - key is the primary key: at most one live code per email
    - A row whose expires_at has passed is treated as absent
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from proofpass.db.base import Base


class SigninCode(Base):
    __tablename__ = "signin_codes"

    key: Mapped[str] = mapped_column(String(400), primary_key=True)
    value: Mapped[str] = mapped_column(String(64), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True,
    )
