"""Credential Requests — pure builders for the Issuer's signing request.

Invariants:
    - Ticket requests carry context = event context id and attachment {event_id}
    - Email requests carry the configured email context and attachment {email}
    - subject_id is a 248-bit hash of the email: stable across calls, email not recoverable
    - expired_at is an absolute unix timestamp computed from the caller-supplied `now`
    - issued_at/expire_at returned to callers come from here, never from the Issuer

Design Decisions:
    - Frozen dataclasses with to_payload(): the wire shape lives next to the type
    - SHA-256 truncated to 248 bits for the subject id: fits a BN254 field element
"""

import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta

from proofpass.core.domain_types import (
    CREDENTIAL_PROTOCOL_VERSION,
    EMAIL_CREDENTIAL_VALIDITY,
    SUBJECT_ID_BITS,
    TICKET_CREDENTIAL_VALIDITY,
    CredentialKind,
    CredentialPurpose,
)


def subject_id_for_email(email: str) -> str:
    """Deterministic decimal subject id derived from the email."""
    digest = hashlib.sha256(email.encode("utf-8")).digest()
    return str(int.from_bytes(digest[: SUBJECT_ID_BITS // 8], "big"))


@dataclass(frozen=True)
class CredentialHeader:
    version: int
    type_id: str
    context: str
    subject_id: str


@dataclass(frozen=True)
class CredentialBody:
    type_id: str
    revocable: int = 0


@dataclass(frozen=True)
class SignedCredentialRequest:
    """Everything the Issuer needs to sign one credential."""
    purpose: CredentialPurpose
    header: CredentialHeader
    body: CredentialBody
    attachments: dict[str, str]
    chain_id: int
    identity_commitment: str
    issued_at: datetime
    expire_at: datetime

    @property
    def expired_at_unix(self) -> int:
        return int(self.expire_at.timestamp())

    def to_payload(self) -> dict:
        """JSON form sent to the Issuer."""
        return {
            "header": {
                "version": self.header.version,
                "type": self.header.type_id,
                "context": self.header.context,
                "id": self.header.subject_id,
            },
            "body": {
                "tp": {
                    "type_id": self.body.type_id,
                    "revocable": self.body.revocable,
                },
            },
            "attachments": {"attachments": dict(self.attachments)},
            "chain_id": self.chain_id,
            "identity_commitment": self.identity_commitment,
            "expired_at": str(self.expired_at_unix),
        }


def _build(
    *,
    purpose: CredentialPurpose,
    context: str,
    email: str,
    identity_commitment: str,
    attachments: dict[str, str],
    chain_id: int,
    validity: timedelta,
    now: datetime,
    kind: CredentialKind,
) -> SignedCredentialRequest:
    if not identity_commitment:
        raise ValueError("identity_commitment must be set")
    if not context:
        raise ValueError("context must be set")
    return SignedCredentialRequest(
        purpose=purpose,
        header=CredentialHeader(
            version=CREDENTIAL_PROTOCOL_VERSION,
            type_id=kind.value,
            context=context,
            subject_id=subject_id_for_email(email),
        ),
        body=CredentialBody(type_id=kind.value),
        attachments=attachments,
        chain_id=chain_id,
        identity_commitment=identity_commitment,
        issued_at=now,
        expire_at=now + validity,
    )


def build_ticket_request(
    *,
    event_id: str,
    event_context_id: str,
    email: str,
    identity_commitment: str,
    chain_id: int,
    now: datetime,
) -> SignedCredentialRequest:
    return _build(
        purpose=CredentialPurpose.TICKET,
        context=event_context_id,
        email=email,
        identity_commitment=identity_commitment,
        attachments={"event_id": event_id},
        chain_id=chain_id,
        validity=TICKET_CREDENTIAL_VALIDITY,
        now=now,
        kind=CredentialKind.UNIT,
    )


def build_email_request(
    *,
    email_context_id: str,
    email: str,
    identity_commitment: str,
    chain_id: int,
    now: datetime,
) -> SignedCredentialRequest:
    return _build(
        purpose=CredentialPurpose.EMAIL,
        context=email_context_id,
        email=email,
        identity_commitment=identity_commitment,
        attachments={"email": email},
        chain_id=chain_id,
        validity=EMAIL_CREDENTIAL_VALIDITY,
        now=now,
        kind=CredentialKind.UNIT,
    )
