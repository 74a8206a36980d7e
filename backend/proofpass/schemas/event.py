"""Event Schemas — create/update payloads and the public event view.

Invariants:
    - EventResponse never exposes admin_code
    - start_date must not be after end_date on create; update checks it when both are sent
    - EventUpdate fields are all optional (partial update)
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class EventCreate(BaseModel):
    name: str = Field(min_length=1, max_length=255)
    description: str = Field(max_length=10_000)
    url: str = Field(max_length=2048)
    admin_code: str = Field(min_length=1, max_length=255)
    start_date: datetime
    end_date: datetime

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class EventUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = Field(None, max_length=10_000)
    url: str | None = Field(None, max_length=2048)
    admin_code: str | None = Field(None, min_length=1, max_length=255)
    start_date: datetime | None = None
    end_date: datetime | None = None

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class EventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: str
    url: str
    chain_id: str
    context_id: str
    context_string: str
    issuer_key_id: str
    start_date: datetime
    end_date: datetime
