"""Service test fixtures — async DB, fake collaborators, FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory SQLite database
    - get_db and every collaborator provider are overridden on the app
    - The OTC store is the real SqlOTCStore over the test DB, driven by a fake clock
    - Notifier, Issuer and ContextRegistry are in-memory fakes that record calls

Design Decisions:
    - SQLite in-memory: fast, no external dependency, uniqueness constraints still enforced
    - db_manager patched so the readiness probe sees the test engine
"""

import hashlib
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import (
    AsyncSession, create_async_engine, async_sessionmaker,
)
from httpx import ASGITransport, AsyncClient

from proofpass.api import dependencies as deps
from proofpass.core.errors import CollaboratorError
from proofpass.core.session_token import SessionTokenIssuer
from proofpass.db.base import Base
from proofpass.infrastructure.database import get_db, DatabaseSessionManager
from proofpass.infrastructure.otc_store import SqlOTCStore
import proofpass.infrastructure.database as db_module
from proofpass.main import app
from proofpass.models.event import Event
from proofpass.models.event_admin import EventAdmin
from proofpass.models.registration import Registration
from proofpass.models.user import User

TEST_CONTEXT_ID = "1141602106146278712378011434016917046428036745"


class FakeClock:
    """Settable UTC clock shared by the store and the token issuer."""

    def __init__(self, start: datetime | None = None):
        self.now = start or datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeNotifier:
    def __init__(self):
        self.sent: list[tuple[str, str]] = []
        self.fail = False

    async def send(self, email, code, timeout=None):
        if self.fail:
            raise CollaboratorError("email", "send_email failed")
        self.sent.append((email, code))

    def last_code(self, email: str) -> str:
        return [c for e, c in self.sent if e == email][-1]


class FakeIssuer:
    def __init__(self):
        self.requests = []

    async def generate_signed_credential(self, request, timeout=None):
        self.requests.append(request)
        return f"signed-{request.purpose.value}-{len(self.requests)}"


class FakeRegistry:
    def __init__(self):
        self.calculated: list[str] = []
        self.registered: list[str] = []

    async def calculate_context_id(self, context, timeout=None):
        self.calculated.append(context)
        digest = hashlib.sha256(context.encode("utf-8")).digest()[:20]
        return str(int.from_bytes(digest, "big"))

    async def register_context(self, context, timeout=None):
        self.registered.append(context)
        return await self.calculate_context_id(context)


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def test_session_factory(test_engine):
    return async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False,
    )


@pytest.fixture
async def test_db(test_session_factory):
    async with test_session_factory() as session:
        yield session


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def otc_store(test_session_factory, clock):
    return SqlOTCStore(test_session_factory, clock=clock)


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def issuer():
    return FakeIssuer()


@pytest.fixture
def registry():
    return FakeRegistry()


@pytest.fixture
def tokens():
    return SessionTokenIssuer("test-secret-key", timedelta(hours=1))


@pytest.fixture
async def client(
    test_engine, test_session_factory, otc_store, notifier, issuer, registry, tokens,
):
    """FastAPI test client with DB and collaborator providers overridden."""
    async def override_get_db():
        async with test_session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[deps.get_otc_store] = lambda: otc_store
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    app.dependency_overrides[deps.get_issuer] = lambda: issuer
    app.dependency_overrides[deps.get_registry] = lambda: registry
    app.dependency_overrides[deps.get_token_issuer] = lambda: tokens

    original_manager = db_module.db_manager
    fake_manager = DatabaseSessionManager.__new__(DatabaseSessionManager)
    fake_manager.engine = test_engine
    fake_manager._session_factory = test_session_factory
    db_module.db_manager = fake_manager

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
    db_module.db_manager = original_manager


# ─── Seed data ──────────────────────────────────────────────────

@pytest.fixture
async def seed_user(test_db):
    """User with identity fields already set."""
    user = User(
        email="alice@example.com",
        identity_commitment="1234567890",
        encrypted_identity_secret="enc-secret",
        encrypted_internal_nullifier="enc-nullifier",
        is_encrypted=True,
    )
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def bare_user(test_db):
    """Freshly created user, identity not yet set."""
    user = User(email="bob@example.com", is_encrypted=True)
    test_db.add(user)
    await test_db.commit()
    await test_db.refresh(user)
    return user


@pytest.fixture
async def seed_event(test_db, seed_user):
    """Event E1 administered by seed_user, admin code "secret"."""
    event = Event(
        name="DevCon",
        description="Annual conference",
        url="https://devcon.example.com",
        admin_code="secret",
        chain_id="1",
        context_id=TEST_CONTEXT_ID,
        context_string="[proofpass.io][e1]DevCon",
        issuer_key_id="0xc4525dA874A6A3877db65e37f21eEc0b41ef9877",
        start_date=datetime(2026, 5, 1, tzinfo=timezone.utc),
        end_date=datetime(2026, 5, 3, tzinfo=timezone.utc),
    )
    event.admins.append(EventAdmin(user_id=seed_user.id))
    test_db.add(event)
    await test_db.commit()
    await test_db.refresh(event)
    return event


@pytest.fixture
async def seed_registration(test_db, seed_event, seed_user):
    registration = Registration(event_id=seed_event.id, email=seed_user.email)
    test_db.add(registration)
    await test_db.commit()
    return registration


@pytest.fixture
def auth_headers(tokens):
    def _headers(user) -> dict:
        return {"Authorization": f"Bearer {tokens.issue(user.id, user.email)}"}
    return _headers
