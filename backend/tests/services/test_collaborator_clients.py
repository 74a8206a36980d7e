"""Collaborator Clients — wire format and error mapping for Issuer, registry and SES.

Invariants:
    - Issuer: POST of the request payload, signed_cred returned verbatim
    - Registry: contract calls carry the calculateContextID / registerContext
      selectors; uint160 results come back as decimal strings
    - Failures map to CollaboratorError, timeouts to OperationTimeoutError
"""

import asyncio
import json
from datetime import datetime, timezone

import aiohttp
import httpx
import pytest
from botocore.exceptions import ClientError
from web3 import AsyncWeb3
from web3.providers.async_base import AsyncBaseProvider

from proofpass.core.credential_request import build_ticket_request
from proofpass.core.errors import CollaboratorError, OperationTimeoutError
from proofpass.infrastructure.context_registry import Web3ContextRegistry
from proofpass.infrastructure.issuer_client import HttpIssuerClient
from proofpass.infrastructure.notifier import SIGNIN_SUBJECT, SesNotifier

REQUEST = build_ticket_request(
    event_id="e1", event_context_id="987", email="a@b.com",
    identity_commitment="42", chain_id=1,
    now=datetime(2026, 1, 1, tzinfo=timezone.utc),
)
CONTRACT = "0x" + "ab" * 20


def _issuer(handler) -> HttpIssuerClient:
    client = httpx.AsyncClient(
        base_url="http://issuer.test", transport=httpx.MockTransport(handler),
    )
    return HttpIssuerClient("http://issuer.test", timeout_seconds=5.0, client=client)


# ─── Issuer ─────────────────────────────────────────────────────

async def test_issuer_posts_payload_and_returns_signed_cred():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"signed_cred": "opaque-cred"})

    issuer = _issuer(handler)
    assert await issuer.generate_signed_credential(REQUEST) == "opaque-cred"
    assert seen["path"] == "/v1/credentials/generate-signed"
    assert seen["body"] == REQUEST.to_payload()
    await issuer.aclose()


async def test_issuer_error_status_is_collaborator_error():
    issuer = _issuer(lambda request: httpx.Response(502, text="bad gateway"))
    with pytest.raises(CollaboratorError) as exc:
        await issuer.generate_signed_credential(REQUEST)
    assert exc.value.collaborator == "issuer"
    assert exc.value.http_status == 500


async def test_issuer_missing_credential_is_collaborator_error():
    issuer = _issuer(lambda request: httpx.Response(200, json={"other": 1}))
    with pytest.raises(CollaboratorError):
        await issuer.generate_signed_credential(REQUEST)


async def test_issuer_timeout_is_operation_timeout():
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(OperationTimeoutError) as exc:
        await _issuer(handler).generate_signed_credential(REQUEST, timeout=1.0)
    assert exc.value.http_status == 500


async def test_issuer_sends_exactly_one_request_on_failure():
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    with pytest.raises(CollaboratorError):
        await _issuer(handler).generate_signed_credential(REQUEST)
    assert len(calls) == 1


# ─── Context registry ───────────────────────────────────────────

class _ScriptedProvider(AsyncBaseProvider):
    """Answers each RPC method from a handler: (method, params) -> result."""

    def __init__(self, handler):
        super().__init__()
        self.handler = handler
        self.delay = 0.0
        self.calls: list[tuple[str, list]] = []

    async def make_request(self, method, params):
        self.calls.append((method, params))
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.handler(method, params)
        if isinstance(outcome, BaseException):
            raise outcome
        if isinstance(outcome, dict) and "error" in outcome:
            return {"jsonrpc": "2.0", "id": len(self.calls), **outcome}
        return {"jsonrpc": "2.0", "id": len(self.calls), "result": outcome}

    async def is_connected(self, show_traceback=False):
        return True


def _word(value: int) -> str:
    return "0x" + value.to_bytes(32, "big").hex()


def _registry(handler, sender=None):
    provider = _ScriptedProvider(handler)
    registry = Web3ContextRegistry(
        "http://rpc.test", CONTRACT, sender_address=sender, timeout_seconds=5.0,
        w3=AsyncWeb3(provider, middleware=[]),
    )
    return registry, provider


def _calldata(params) -> str:
    data = params[0]["data"]
    return data if isinstance(data, str) else "0x" + bytes(data).hex()


async def test_calculate_context_id_calls_contract():
    registry, provider = _registry(lambda method, params: _word(1000))

    assert await registry.calculate_context_id("[proofpass.io][e1]DevCon") == "1000"
    ((method, params),) = provider.calls
    assert method == "eth_call"
    assert params[0]["to"].lower() == CONTRACT
    calldata = _calldata(params)
    assert calldata.startswith("0xf94ea222")
    assert "[proofpass.io][e1]DevCon".encode("utf-8").hex() in calldata


async def test_calculate_context_id_renders_full_uint160():
    top = (1 << 160) - 1
    registry, _ = _registry(lambda method, params: _word(top))
    assert await registry.calculate_context_id("ctx") == str(top)


async def test_rpc_error_is_collaborator_error():
    registry, _ = _registry(lambda method, params: {
        "error": {"code": -32000, "message": "node unavailable"},
    })
    with pytest.raises(CollaboratorError) as exc:
        await registry.calculate_context_id("ctx")
    assert exc.value.collaborator == "context_registry"


async def test_transport_failure_is_collaborator_error():
    registry, _ = _registry(
        lambda method, params: aiohttp.ClientConnectionError("connection refused"),
    )
    with pytest.raises(CollaboratorError):
        await registry.calculate_context_id("ctx")


async def test_slow_node_is_operation_timeout():
    registry, provider = _registry(lambda method, params: _word(1))

    provider.delay = 1.0
    with pytest.raises(OperationTimeoutError) as exc:
        await registry.calculate_context_id("ctx", timeout=0.01)
    assert exc.value.collaborator == "context_registry"


async def test_register_context_needs_sender():
    registry, provider = _registry(lambda method, params: _word(0))
    with pytest.raises(CollaboratorError):
        await registry.register_context("ctx")
    assert provider.calls == []


async def test_register_context_sends_transaction_then_reads_id():
    sender = "0x" + "cd" * 20

    def handler(method, params):
        if method == "eth_sendTransaction":
            return "0x" + "11" * 32
        return _word(7)

    registry, provider = _registry(handler, sender=sender)
    assert await registry.register_context("ctx") == "7"

    methods = [method for method, _ in provider.calls]
    assert methods == ["eth_sendTransaction", "eth_call"]
    tx = provider.calls[0][1][0]
    assert tx["from"].lower() == sender
    assert tx["to"].lower() == CONTRACT
    assert _calldata([tx]).startswith("0x3af6bf38")


# ─── SES notifier ───────────────────────────────────────────────

class _StubSes:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    def send_email(self, **kwargs):
        self.calls.append(kwargs)
        if self.error:
            raise self.error
        return {"MessageId": "m-1"}


async def test_ses_notifier_sends_code():
    ses = _StubSes()
    await SesNotifier("no-reply@proofpass.io", "us-west-2", client=ses).send("a@b.com", "123456")

    (call,) = ses.calls
    assert call["Source"] == "no-reply@proofpass.io"
    assert call["Destination"] == {"ToAddresses": ["a@b.com"]}
    assert call["Message"]["Subject"]["Data"] == SIGNIN_SUBJECT
    assert "123456" in call["Message"]["Body"]["Text"]["Data"]
    assert "123456" in call["Message"]["Body"]["Html"]["Data"]


async def test_ses_failure_is_collaborator_error():
    error = ClientError({"Error": {"Code": "MessageRejected", "Message": "no"}}, "SendEmail")
    with pytest.raises(CollaboratorError) as exc:
        await SesNotifier("s@x.io", "us-west-2", client=_StubSes(error)).send("a@b.com", "1")
    assert exc.value.collaborator == "email"
