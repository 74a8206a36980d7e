"""API Dependencies — FastAPI providers for auth, collaborators and services.

Invariants:
    - Every protected route resolves the caller through require_claims; a missing or
      invalid bearer token becomes UnauthorizedError (401) before the handler runs
    - Collaborators come from the lifespan-built singleton; tests replace the
      get_* providers through app.dependency_overrides
    - Services are constructed per request around the request's DB session
"""

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from proofpass.config import Settings, get_settings
from proofpass.core.errors import ErrorContext, UnauthorizedError
from proofpass.core.repository_protocols import (
    ContextRegistry, IssuerClient, Notifier, OTCStore,
)
from proofpass.core.session_token import SessionClaims, SessionTokenIssuer
from proofpass.infrastructure import collaborators as wiring
from proofpass.infrastructure.database import get_db
from proofpass.services.context_binder import ContextBinder
from proofpass.services.credential_orchestrator import CredentialOrchestrator
from proofpass.services.otc_authenticator import OTCAuthenticator

_bearer = HTTPBearer(auto_error=False)


def _collaborators() -> wiring.Collaborators:
    if wiring.collaborators is None:
        raise RuntimeError("Collaborators not initialized")
    return wiring.collaborators


# ─── Collaborators ──────────────────────────────────────────────

def get_otc_store() -> OTCStore:
    return _collaborators().otc_store


def get_notifier() -> Notifier:
    return _collaborators().notifier


def get_issuer() -> IssuerClient:
    return _collaborators().issuer


def get_registry() -> ContextRegistry:
    return _collaborators().registry


def get_token_issuer() -> SessionTokenIssuer:
    return _collaborators().tokens


# ─── Auth ───────────────────────────────────────────────────────

async def require_claims(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    tokens: SessionTokenIssuer = Depends(get_token_issuer),
) -> SessionClaims:
    """Resolve the bearer token into session claims or fail with 401."""
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError(
            "Missing bearer token", "MISSING_TOKEN",
            ErrorContext(operation="authenticate"),
        )
    return tokens.validate(credentials.credentials)


# ─── Services ───────────────────────────────────────────────────

def get_authenticator(
    store: OTCStore = Depends(get_otc_store),
    notifier: Notifier = Depends(get_notifier),
    settings: Settings = Depends(get_settings),
) -> OTCAuthenticator:
    return OTCAuthenticator(
        store, notifier,
        ttl_seconds=settings.otc_ttl_seconds,
        timeout=settings.email_timeout_seconds,
    )


def get_context_binder(
    registry: ContextRegistry = Depends(get_registry),
    settings: Settings = Depends(get_settings),
) -> ContextBinder:
    return ContextBinder(registry, timeout=settings.registry_timeout_seconds)


def get_credential_orchestrator(
    db: AsyncSession = Depends(get_db),
    issuer: IssuerClient = Depends(get_issuer),
    settings: Settings = Depends(get_settings),
) -> CredentialOrchestrator:
    return CredentialOrchestrator(
        db, issuer,
        chain_id=settings.issuer_chain_id,
        email_context_id=settings.email_credential_context_id,
        issuer_timeout=settings.issuer_timeout_seconds,
    )
