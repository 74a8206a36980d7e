"""Credential Schemas — signed-credential responses and encrypted credential storage.

Invariants:
    - Stored credential data is opaque text; only presence is validated
    - Issued credentials carry issued_at/expire_at computed by the server
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, model_validator


class SignedCredentialResponse(BaseModel):
    """Unencrypted credential returned by a request-*-credential route."""
    credential: str
    issued_at: datetime
    expire_at: datetime
    event_id: str | None = None


class _StoredCredentialRequest(BaseModel):
    data: str = Field(min_length=1)
    issued_at: datetime
    expire_at: datetime

    @model_validator(mode="after")
    def check_window(self):
        if self.expire_at <= self.issued_at:
            raise ValueError("expire_at must be after issued_at")
        return self


class EmailCredentialStore(_StoredCredentialRequest):
    """Client-encrypted email credential."""


class TicketCredentialStore(_StoredCredentialRequest):
    """Client-encrypted ticket credential for one event."""
    event_id: str = Field(min_length=1, max_length=36)


class EmailCredentialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    identity_commitment: str
    data: str
    issued_at: datetime
    expire_at: datetime


class TicketCredentialResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    event_id: str
    data: str
    issued_at: datetime
    expire_at: datetime
