"""Boundary Protocols — contracts between core and the external collaborators.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Every blocking call is async and accepts an optional timeout in seconds
    - OTCStore.set_if_absent and OTCStore.get_and_delete are single atomic operations
    - Implementations provided by infrastructure/ via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no inheritance
    - ContextRegistry exposes only the two contract operations; call/transact
      plumbing stays inside the client
"""

from typing import Protocol

from proofpass.core.credential_request import SignedCredentialRequest


class OTCStore(Protocol):
    """Key-value store with per-key TTL and atomic fetch-and-delete."""
    async def set_if_absent(
        self, key: str, value: str, ttl_seconds: int, timeout: float | None = None,
    ) -> bool: ...
    async def set_with_ttl(
        self, key: str, value: str, ttl_seconds: int, timeout: float | None = None,
    ) -> None: ...
    async def get_and_delete(
        self, key: str, timeout: float | None = None,
    ) -> str | None: ...
    async def exists(self, key: str, timeout: float | None = None) -> bool: ...


class Notifier(Protocol):
    """Delivers a one-time code to an email address."""
    async def send(self, email: str, code: str, timeout: float | None = None) -> None: ...


class IssuerClient(Protocol):
    """External credential-signing service."""
    async def generate_signed_credential(
        self, request: SignedCredentialRequest, timeout: float | None = None,
    ) -> str: ...


class ContextRegistry(Protocol):
    """On-chain context registry, reduced to its two contract operations."""
    async def calculate_context_id(
        self, context: str, timeout: float | None = None,
    ) -> str: ...
    async def register_context(
        self, context: str, timeout: float | None = None,
    ) -> str: ...
