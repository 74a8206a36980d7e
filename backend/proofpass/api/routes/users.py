"""User Routes — sign-in codes, login, profile and credential storage.

Invariants:
    - request-verification-code and login are the only unauthenticated user routes
    - Every /me route acts on the user named by the session token's claims
    - Handlers delegate to services; errors propagate to the global handlers
"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.api.dependencies import (
    get_authenticator, get_credential_orchestrator, get_token_issuer, require_claims,
)
from proofpass.core.session_token import SessionClaims, SessionTokenIssuer
from proofpass.infrastructure.database import get_db
from proofpass.schemas.credential import (
    EmailCredentialResponse, EmailCredentialStore, SignedCredentialResponse,
    TicketCredentialResponse, TicketCredentialStore,
)
from proofpass.schemas.user import (
    LoginRequest, LoginResponse, UserResponse, UserUpdate, VerificationCodeRequest,
)
from proofpass.services.account_service import AccountService
from proofpass.services.credential_orchestrator import CredentialOrchestrator
from proofpass.services.otc_authenticator import OTCAuthenticator

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/v1/user", tags=["user"])


@router.post("/request-verification-code")
async def request_verification_code(
    body: VerificationCodeRequest,
    authenticator: OTCAuthenticator = Depends(get_authenticator),
):
    """Email a one-time sign-in code."""
    await authenticator.request_code(body.email)
    return {"status": "sent"}


@router.post("/login", response_model=LoginResponse)
async def login(
    body: LoginRequest,
    db: AsyncSession = Depends(get_db),
    authenticator: OTCAuthenticator = Depends(get_authenticator),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
):
    """Redeem a sign-in code for a session token."""
    result = await AccountService(db).login(body.email, body.code, authenticator, tokens)
    return LoginResponse(token=result.token)


@router.get("/me", response_model=UserResponse)
async def get_me(
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    user = await AccountService(db).get_user(claims.user_id)
    return UserResponse.model_validate(user)


@router.put("/me/update", response_model=UserResponse)
async def update_me(
    body: UserUpdate,
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    """Set the identity fields. Allowed once."""
    user = await AccountService(db).set_identity(
        claims.user_id,
        body.identity_commitment,
        body.encrypted_identity_secret,
        body.encrypted_internal_nullifier,
    )
    return UserResponse.model_validate(user)


@router.post(
    "/me/request-email-credential",
    response_model=SignedCredentialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def request_email_credential(
    claims: SessionClaims = Depends(require_claims),
    orchestrator: CredentialOrchestrator = Depends(get_credential_orchestrator),
):
    issued = await orchestrator.request_email_credential(claims.user_id, claims.email)
    return SignedCredentialResponse(
        credential=issued.credential,
        issued_at=issued.issued_at,
        expire_at=issued.expire_at,
    )


@router.put(
    "/me/email-credential",
    response_model=EmailCredentialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def store_email_credential(
    body: EmailCredentialStore,
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    credential = await AccountService(db).store_email_credential(
        claims.user_id, body.data, body.issued_at, body.expire_at,
    )
    return EmailCredentialResponse.model_validate(credential)


@router.get("/me/email-credential", response_model=EmailCredentialResponse | None)
async def get_email_credential(
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    credential = await AccountService(db).get_email_credential(claims.user_id)
    if credential is None:
        return None
    return EmailCredentialResponse.model_validate(credential)


@router.put(
    "/me/ticket-credential",
    response_model=TicketCredentialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def store_ticket_credential(
    body: TicketCredentialStore,
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    credential = await AccountService(db).store_ticket_credential(
        claims.user_id, claims.email, body.event_id,
        body.data, body.issued_at, body.expire_at,
    )
    return TicketCredentialResponse.model_validate(credential)


@router.get(
    "/me/ticket-credentials", response_model=list[TicketCredentialResponse],
)
async def list_ticket_credentials(
    claims: SessionClaims = Depends(require_claims),
    db: AsyncSession = Depends(get_db),
):
    credentials = await AccountService(db).list_ticket_credentials(claims.email)
    return [TicketCredentialResponse.model_validate(c) for c in credentials]
