"""
Shared fixtures: in-memory SQLite store, controllable clock, fake renderer,
and a TestClient wired with all three.
"""
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from app.core.errors import RenderError
from app.core.security import JWTIdentityVerifier, create_access_token
from app.db.session import build_engine
from app.db.store import DocumentStore
from app.pdf.renderer import Renderer
from app.services.share_service import ShareManager

TEST_DATABASE_URL = "sqlite+aiosqlite://"
TEST_SECRET = "test-secret"
TEST_FRONTEND_URL = "https://app.example.com"

FAKE_PDF = b"%PDF-1.4\n1 0 obj\n<<>>\nendobj\ntrailer\n<<>>\n%%EOF\n"


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = None):
        self.now = now or datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


class FakeRenderer(Renderer):
    """Records the HTML it was asked to render and returns a tiny PDF."""

    name = "fake"

    def __init__(self, fail: bool = False):
        super().__init__()
        self.fail = fail
        self.rendered = []
        self.started = False
        self.closed = False

    async def start(self) -> None:
        self.started = True

    async def close(self) -> None:
        self.closed = True

    async def render(self, html: str) -> bytes:
        if self.fail:
            raise RenderError("engine crashed")
        self.rendered.append(html)
        return FAKE_PDF


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
async def store():
    """Fresh in-memory database for each test."""
    store = DocumentStore(build_engine(TEST_DATABASE_URL))
    await store.create_tables()
    try:
        yield store
    finally:
        await store.dispose()


@pytest.fixture
def share_manager(store, clock):
    return ShareManager(store, frontend_url=TEST_FRONTEND_URL, clock=clock)


@pytest.fixture
def renderer():
    return FakeRenderer()


@pytest.fixture
def client(clock, renderer):
    """TestClient running the full lifespan against an in-memory database."""
    from app.main import create_app

    app = create_app(
        store=DocumentStore(build_engine(TEST_DATABASE_URL)),
        renderer=renderer,
        identity_verifier=JWTIdentityVerifier(secret_key=TEST_SECRET),
        stylesheet="body { font-size: 11pt; }",
        share_manager_options={"frontend_url": TEST_FRONTEND_URL, "clock": clock},
    )
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: str) -> dict:
    token = create_access_token({"sub": user_id}, secret_key=TEST_SECRET)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice():
    return auth_headers("alice")


@pytest.fixture
def bob():
    return auth_headers("bob")


@pytest.fixture
def make_headers():
    return auth_headers


@pytest.fixture
def failing_renderer():
    return FakeRenderer(fail=True)
