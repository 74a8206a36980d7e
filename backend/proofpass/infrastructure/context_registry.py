"""Context Registry Client — the two registry contract operations through web3.

Invariants:
    - calculate_context_id is a read-only call of calculateContextID(string):
      same input -> same output, no chain state touched
    - register_context transacts registerContext(string) from a node-managed account;
      no request flow calls it
    - Results are uint160 values rendered as decimal strings
    - web3/provider errors -> CollaboratorError("context_registry");
      deadline expiry -> OperationTimeoutError

Design Decisions:
    - AsyncWeb3 contract binding built from the registry ABI; provider retries are
      disabled so a failed call surfaces once, like the Issuer client
"""

import logging

from aiohttp import ClientError
from web3 import AsyncHTTPProvider, AsyncWeb3
from web3.exceptions import Web3Exception

from proofpass.core.errors import CollaboratorError
from proofpass.infrastructure.deadlines import deadline

logger = logging.getLogger(__name__)

CONTEXT_REGISTRY_ABI = [
    {"inputs": [], "name": "AlreadyExists", "type": "error"},
    {
        "anonymous": False,
        "inputs": [
            {"indexed": True, "internalType": "uint160", "name": "contextId", "type": "uint160"},
            {"indexed": False, "internalType": "string", "name": "context", "type": "string"},
        ],
        "name": "ContextRegistered",
        "type": "event",
    },
    {
        "inputs": [{"internalType": "string", "name": "context", "type": "string"}],
        "name": "calculateContextID",
        "outputs": [{"internalType": "uint160", "name": "", "type": "uint160"}],
        "stateMutability": "pure",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "uint160", "name": "contextId", "type": "uint160"}],
        "name": "getContext",
        "outputs": [{"internalType": "string", "name": "", "type": "string"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [{"internalType": "string", "name": "context", "type": "string"}],
        "name": "registerContext",
        "outputs": [{"internalType": "uint160", "name": "", "type": "uint160"}],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


class Web3ContextRegistry:
    """ContextRegistry over an Ethereum node, bound to the registry contract."""

    COLLABORATOR = "context_registry"

    def __init__(
        self,
        rpc_url: str,
        contract_address: str,
        sender_address: str | None = None,
        timeout_seconds: float = 10.0,
        w3: AsyncWeb3 | None = None,
    ):
        self._owns_provider = w3 is None
        self._w3 = w3 or AsyncWeb3(
            AsyncHTTPProvider(rpc_url, exception_retry_configuration=None),
        )
        self._contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(contract_address),
            abi=CONTEXT_REGISTRY_ABI,
        )
        self._sender_address = (
            AsyncWeb3.to_checksum_address(sender_address) if sender_address else None
        )
        self.timeout_seconds = timeout_seconds

    async def calculate_context_id(
        self, context: str, timeout: float | None = None,
    ) -> str:
        call = self._contract.functions.calculateContextID(context).call()
        value = await self._invoke("calculateContextID", call, timeout)
        return str(value)

    async def register_context(
        self, context: str, timeout: float | None = None,
    ) -> str:
        if not self._sender_address:
            raise CollaboratorError(
                self.COLLABORATOR, "no sender account configured for registerContext",
            )
        tx = self._contract.functions.registerContext(context).transact(
            {"from": self._sender_address},
        )
        tx_hash = await self._invoke("registerContext", tx, timeout)
        logger.info(
            f"registerContext submitted in tx {AsyncWeb3.to_hex(tx_hash)}",
            extra={"collaborator": self.COLLABORATOR},
        )
        # registerContext returns calculateContextID(context); the id is deterministic
        return await self.calculate_context_id(context, timeout)

    async def _invoke(self, function: str, awaitable, timeout: float | None):
        effective_timeout = timeout if timeout is not None else self.timeout_seconds
        async with deadline(self.COLLABORATOR, effective_timeout):
            try:
                return await awaitable
            except (Web3Exception, ClientError, ValueError) as e:
                logger.error(
                    f"{function} failed: {e}",
                    extra={"collaborator": self.COLLABORATOR},
                )
                raise CollaboratorError(self.COLLABORATOR, f"{function} failed") from e

    async def aclose(self) -> None:
        if self._owns_provider:
            await self._w3.provider.disconnect()
