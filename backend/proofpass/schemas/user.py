"""User Schemas — login and profile payloads.

Invariants:
    - Emails are validated with EmailStr and normalized (stripped, lower-cased)
    - Login rejects an empty code at the boundary (400)
    - Set-identity requires all three identity fields, each non-empty
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from proofpass.core.one_time_code import normalize_email


class _EmailPayload(BaseModel):
    email: EmailStr

    @field_validator("email", mode="after")
    @classmethod
    def normalize(cls, v: str) -> str:
        return normalize_email(v)


class VerificationCodeRequest(_EmailPayload):
    """Ask for a sign-in code to be emailed."""


class LoginRequest(_EmailPayload):
    code: str = Field(min_length=1, max_length=32)

    @field_validator("code")
    @classmethod
    def strip_code(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("code cannot be empty")
        return v


class LoginResponse(BaseModel):
    token: str


class UserUpdate(BaseModel):
    """Write-once identity fields."""
    identity_commitment: str = Field(min_length=1, max_length=256)
    encrypted_identity_secret: str = Field(min_length=1)
    encrypted_internal_nullifier: str = Field(min_length=1)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    identity_commitment: str
    encrypted_identity_secret: str
    encrypted_internal_nullifier: str
    is_encrypted: bool
    created_at: datetime
