"""Context Binder — derives the context id that scopes an event's credentials.

Invariants:
    - derive_context_id only calls the registry's pure calculation, never registration
    - Same (event_id, event_name) -> same BoundContext
"""

import logging
from dataclasses import dataclass

from proofpass.core.context_binding import build_context_string
from proofpass.core.domain_types import ContextId, EventId
from proofpass.core.repository_protocols import ContextRegistry
from proofpass.infrastructure.observability import log_context

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BoundContext:
    context_id: ContextId
    context_string: str


class ContextBinder:
    """Resolves event contexts through the context registry."""

    def __init__(self, registry: ContextRegistry, timeout: float | None = None):
        self.registry = registry
        self.timeout = timeout

    async def derive_context_id(self, event_id: EventId, event_name: str) -> BoundContext:
        context_string = build_context_string(event_id, event_name)
        context_id = await self.registry.calculate_context_id(
            context_string, timeout=self.timeout,
        )
        logger.info(
            f"Derived context id {context_id}",
            extra=log_context("derive_context_id", event_id=event_id),
        )
        return BoundContext(context_id=ContextId(context_id), context_string=context_string)

