"""Request Schemas — boundary validation for user, event and attendance payloads."""

import pytest
from pydantic import ValidationError

from proofpass.schemas.attendance import RecordAttendanceRequest
from proofpass.schemas.event import EventCreate, EventResponse, EventUpdate
from proofpass.schemas.user import LoginRequest, UserUpdate, VerificationCodeRequest

EVENT = {
    "name": "  DevCon  ",
    "description": "",
    "url": "",
    "admin_code": "secret",
    "start_date": "2026-05-01T00:00:00Z",
    "end_date": "2026-05-03T00:00:00Z",
}


def test_email_is_normalized():
    assert VerificationCodeRequest(email="Alice@Example.COM").email == "alice@example.com"


def test_malformed_email_rejected():
    with pytest.raises(ValidationError):
        VerificationCodeRequest(email="alice")


def test_login_code_stripped_and_required():
    assert LoginRequest(email="a@b.com", code=" 123456 ").code == "123456"
    with pytest.raises(ValidationError):
        LoginRequest(email="a@b.com", code="   ")
    with pytest.raises(ValidationError):
        LoginRequest(email="a@b.com", code="")


def test_user_update_requires_all_three_fields():
    with pytest.raises(ValidationError):
        UserUpdate(identity_commitment="42", encrypted_identity_secret="s")
    with pytest.raises(ValidationError):
        UserUpdate(
            identity_commitment="42", encrypted_identity_secret="s",
            encrypted_internal_nullifier="",
        )


def test_event_name_stripped():
    assert EventCreate(**EVENT).name == "DevCon"


def test_event_dates_ordered():
    with pytest.raises(ValidationError):
        EventCreate(**{**EVENT, "end_date": "2026-04-01T00:00:00Z"})


def test_event_update_is_partial():
    update = EventUpdate(description="new")
    assert update.model_dump(exclude_unset=True) == {"description": "new"}


def test_event_response_has_no_admin_code():
    assert "admin_code" not in EventResponse.model_fields


def test_attendance_requires_nullifier_and_admin_code():
    with pytest.raises(ValidationError):
        RecordAttendanceRequest(type="1", context="1", nullifier="", admin_code="x")
    with pytest.raises(ValidationError):
        RecordAttendanceRequest(type="1", context="1", nullifier="N1")
    body = RecordAttendanceRequest(type="1", context="1", nullifier="N1", admin_code="x")
    assert body.event_id is None and body.key_id is None
