"""Attendance Claim Enforcement — pure checks run before an attendance row is written.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - Checks run in a fixed order: admin code, credential type, credential context
    - First failing check raises; None means the claim may be recorded
    - Admin codes are compared in constant time; an event without an admin code accepts nothing
"""

import hmac

from proofpass.core.context_binding import context_ids_match
from proofpass.core.domain_types import CredentialKind
from proofpass.core.errors import (
    ErrorContext, InvalidContextError, InvalidRequestError, UnauthorizedError,
)

ACCEPTED_ATTENDANCE_KIND = CredentialKind.UNIT


def check_admin_code(
    expected: str | None, submitted: str, context: ErrorContext | None = None,
) -> None:
    if not expected or not hmac.compare_digest(
        expected.encode("utf-8"), submitted.encode("utf-8"),
    ):
        raise UnauthorizedError("Invalid admin code", "INVALID_ADMIN_CODE", context)


def check_credential_type(raw_type: str, context: ErrorContext | None = None) -> CredentialKind:
    kind = CredentialKind.parse(raw_type)
    if kind is not ACCEPTED_ATTENDANCE_KIND:
        raise InvalidRequestError(
            "Invalid credential type", "INVALID_CREDENTIAL_TYPE", context,
        )
    return kind


def check_credential_context(
    presented: str, event_context_id: str | None, context: ErrorContext | None = None,
) -> None:
    if not context_ids_match(presented, event_context_id):
        raise InvalidContextError(context)


def validate_attendance_claim(
    *,
    event_admin_code: str | None,
    event_context_id: str | None,
    submitted_admin_code: str,
    credential_type: str,
    credential_context: str,
    context: ErrorContext | None = None,
) -> CredentialKind:
    """Chain all claim checks in order. Returns the parsed credential kind."""
    check_admin_code(event_admin_code, submitted_admin_code, context)
    kind = check_credential_type(credential_type, context)
    check_credential_context(credential_context, event_context_id, context)
    return kind
