"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, EventId, AttendanceId wrap UUID strings — never mix them up in signatures
    - ContextId is the decimal rendering of a uint160 registry value
    - CredentialKind is the closed set of credential type identifiers

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and compare to wire strings without custom encoders
"""

from datetime import timedelta
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", str)
EventId = NewType("EventId", str)
AttendanceId = NewType("AttendanceId", str)
ContextId = NewType("ContextId", str)
Nullifier = NewType("Nullifier", str)


# ─── Enums ───────────────────────────────────────────────────────

class CredentialKind(str, Enum):
    """Credential type identifiers understood by the Issuer."""
    UNIT = "1"

    @classmethod
    def parse(cls, raw: str) -> "CredentialKind | None":
        """Map a wire value to a kind, None when unrecognized."""
        try:
            return cls(raw)
        except ValueError:
            return None


class CredentialPurpose(str, Enum):
    """What a credential proves: event registration or email ownership."""
    TICKET = "ticket"
    EMAIL = "email"


# ─── Constants ───────────────────────────────────────────────────

PROOFPASS_CONTEXT_PREFIX = "[proofpass.io]"
CREDENTIAL_PROTOCOL_VERSION = 1

TICKET_CREDENTIAL_VALIDITY = timedelta(days=265)
EMAIL_CREDENTIAL_VALIDITY = timedelta(days=14)

OTC_LENGTH = 6
OTC_ALPHABET = "0123456789"

SUBJECT_ID_BITS = 248
