"""Deadlines — bound a collaborator call by a caller-supplied timeout.

Invariants:
    - timeout=None means no deadline beyond the collaborator's own client settings
    - Expiry surfaces as OperationTimeoutError naming the collaborator
    - asyncio.CancelledError from the caller's task passes through untouched
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator

from proofpass.core.errors import ErrorContext, OperationTimeoutError


@asynccontextmanager
async def deadline(
    collaborator: str, timeout: float | None, context: ErrorContext | None = None,
) -> AsyncIterator[None]:
    try:
        async with asyncio.timeout(timeout):
            yield
    except TimeoutError as e:
        raise OperationTimeoutError(collaborator, timeout or 0.0, context) from e
