"""Attendance Schemas — the attendance claim presented at check-in.

Invariants:
    - nullifier and admin_code are required and non-empty
    - event_id in the body is optional; the route rejects it when it differs from the path
"""

from pydantic import BaseModel, Field


class RecordAttendanceRequest(BaseModel):
    type: str = Field(min_length=1, max_length=32)
    context: str = Field(min_length=1, max_length=80)
    nullifier: str = Field(min_length=1, max_length=256)
    key_id: str | None = Field(None, max_length=66)
    event_id: str | None = Field(None, max_length=36)
    admin_code: str = Field(min_length=1, max_length=255)


class RecordAttendanceResponse(BaseModel):
    attendance_id: str
