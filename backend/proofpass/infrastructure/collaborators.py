"""Collaborator Wiring — builds the process-wide external clients from settings.

Invariants:
    - Built once in the app lifespan, after init_db (the OTC store needs the session factory)
    - close_collaborators() releases the httpx clients; safe to call when never initialized
    - Request handlers reach collaborators only through api/dependencies.py

Design Decisions:
    - Module-level singleton mirrors db_manager: one process, one set of clients
    - LogNotifier replaces SES when enable_login_email is false
"""

import logging
from dataclasses import dataclass
from datetime import timedelta

from proofpass.config import Settings
from proofpass.core.repository_protocols import (
    ContextRegistry, IssuerClient, Notifier, OTCStore,
)
from proofpass.core.session_token import SessionTokenIssuer
from proofpass.infrastructure.context_registry import Web3ContextRegistry
from proofpass.infrastructure.database import DatabaseSessionManager
from proofpass.infrastructure.issuer_client import HttpIssuerClient
from proofpass.infrastructure.notifier import LogNotifier, SesNotifier
from proofpass.infrastructure.otc_store import SqlOTCStore

logger = logging.getLogger(__name__)


@dataclass
class Collaborators:
    otc_store: OTCStore
    notifier: Notifier
    issuer: IssuerClient
    registry: ContextRegistry
    tokens: SessionTokenIssuer


# Singleton (initialized on startup)
collaborators: Collaborators | None = None


def build_collaborators(
    settings: Settings, db: DatabaseSessionManager,
) -> Collaborators:
    if settings.enable_login_email:
        notifier: Notifier = SesNotifier(
            sender=settings.login_email_sender, region=settings.ses_region,
        )
    else:
        logger.warning("Login email disabled, sign-in codes will be logged")
        notifier = LogNotifier()

    return Collaborators(
        otc_store=SqlOTCStore(db.session_factory),
        notifier=notifier,
        issuer=HttpIssuerClient(
            settings.issuer_url, timeout_seconds=settings.issuer_timeout_seconds,
        ),
        registry=Web3ContextRegistry(
            settings.eth_rpc_url,
            settings.context_registry_addr,
            sender_address=settings.registry_sender_addr,
            timeout_seconds=settings.registry_timeout_seconds,
        ),
        tokens=SessionTokenIssuer(
            settings.jwt_secret_key,
            timedelta(seconds=settings.jwt_expires_seconds),
            algorithm=settings.jwt_algorithm,
        ),
    )


def init_collaborators(
    settings: Settings, db: DatabaseSessionManager,
) -> Collaborators:
    global collaborators
    collaborators = build_collaborators(settings, db)
    return collaborators


async def close_collaborators() -> None:
    global collaborators
    if collaborators is None:
        return
    for client in (collaborators.issuer, collaborators.registry):
        aclose = getattr(client, "aclose", None)
        if aclose is not None:
            await aclose()
    collaborators = None
