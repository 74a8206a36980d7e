"""Issuer HTTP Client — submits credential-signing requests to the external Issuer.

Invariants:
    - One POST per call, zero retries (transport built with retries=0)
    - Non-2xx, transport errors and malformed bodies -> CollaboratorError("issuer")
    - Timeouts (per-call or client default) -> OperationTimeoutError("issuer")
    - The signed credential is returned verbatim; it is never parsed or trusted for timestamps

Design Decisions:
    - httpx.AsyncClient shared for the process lifetime, closed from the lifespan hook
    - Error mapping follows the resilient model-client wrapper: typed SDK errors in,
      one domain error out
"""

import logging

import httpx

from proofpass.core.credential_request import SignedCredentialRequest
from proofpass.core.errors import CollaboratorError, OperationTimeoutError
from proofpass.infrastructure.deadlines import deadline

logger = logging.getLogger(__name__)

GENERATE_SIGNED_CREDENTIAL_PATH = "/v1/credentials/generate-signed"


class HttpIssuerClient:
    """IssuerClient over JSON/HTTP."""

    COLLABORATOR = "issuer"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ):
        self.timeout_seconds = timeout_seconds
        self._client = client or httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout_seconds,
            transport=httpx.AsyncHTTPTransport(retries=0),
        )

    async def generate_signed_credential(
        self, request: SignedCredentialRequest, timeout: float | None = None,
    ) -> str:
        effective_timeout = timeout if timeout is not None else self.timeout_seconds
        async with deadline(self.COLLABORATOR, effective_timeout):
            try:
                response = await self._client.post(
                    GENERATE_SIGNED_CREDENTIAL_PATH,
                    json=request.to_payload(),
                    timeout=effective_timeout,
                )
                response.raise_for_status()
                body = response.json()
            except httpx.TimeoutException as e:
                raise OperationTimeoutError(self.COLLABORATOR, effective_timeout) from e
            except httpx.HTTPStatusError as e:
                logger.error(
                    f"Issuer returned {e.response.status_code}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(
                    self.COLLABORATOR, f"status {e.response.status_code}",
                ) from e
            except (httpx.HTTPError, ValueError) as e:
                logger.error(
                    f"Issuer call failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, "request failed") from e

        signed = body.get("signed_cred") if isinstance(body, dict) else None
        if not isinstance(signed, str) or not signed:
            raise CollaboratorError(self.COLLABORATOR, "response missing signed_cred")
        return signed

    async def aclose(self) -> None:
        await self._client.aclose()
