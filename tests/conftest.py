import httpx
import pytest
from fastapi.testclient import TestClient

from fanhub.core.dependencies import get_directory_store
from fanhub.core.follows import FollowStateRegistry
from fanhub.core.session import SessionStore
from fanhub.core.views import ViewContext
from fanhub.main import app
from fanhub.services.backend import BackendService
from tests.utils import (
    API_BASE_URL,
    CELEBRITY_IDENTITY,
    FAN_IDENTITY,
    TEST_TOKEN,
    FakeBackend,
)



@pytest.fixture
def fan_session() -> SessionStore:
    """A session store with a signed-in fan."""
    session = SessionStore({})
    session.establish(FAN_IDENTITY, TEST_TOKEN)
    return session

@pytest.fixture
def celebrity_session() -> SessionStore:
    """A session store with a signed-in celebrity."""
    session = SessionStore({})
    session.establish(CELEBRITY_IDENTITY, TEST_TOKEN)
    return session

@pytest.fixture
def fake_backend() -> FakeBackend:
    return FakeBackend()

@pytest.fixture
def registry(fan_session, fake_backend) -> FollowStateRegistry:
    return FollowStateRegistry(fan_session, fake_backend)

@pytest.fixture
async def initialized_registry(registry) -> FollowStateRegistry:
    """A fan registry already loaded from the fake backend."""
    await registry.initialize()
    return registry

@pytest.fixture
def fan_context(fan_session, fake_backend) -> ViewContext:
    """View context over a fan session; the session counts as restored."""
    context = ViewContext(fan_session, backend=fake_backend)
    context.session_restored = True
    return context

@pytest.fixture
def store():
    """The reference backend's in-memory store, emptied around each test."""
    directory_store = get_directory_store()
    directory_store.reset()
    yield directory_store
    directory_store.reset()

@pytest.fixture
def client(store) -> TestClient:
    return TestClient(app)

@pytest.fixture
def asgi_session() -> SessionStore:
    return SessionStore({})

@pytest.fixture
def asgi_backend(store, asgi_session) -> BackendService:
    """A BackendService that talks to the reference app in-process."""
    return BackendService(
        asgi_session,
        base_url=API_BASE_URL,
        transport=httpx.ASGITransport(app=app),
    )
