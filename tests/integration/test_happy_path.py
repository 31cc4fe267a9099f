"""
Integration tests for FanHub happy path scenarios.

This module runs the complete fan journey against the reference backend:
sign up, browse the directory, follow and unfollow celebrities, and see the
same follow state from every view and from a second session.
"""

import asyncio

import httpx
import pytest

from fanhub.core import auth
from fanhub.core.errors import NetworkError
from fanhub.core.follows import FollowStateRegistry
from fanhub.core.session import SessionStore
from fanhub.core.views import (
    CelebrityDashboardView,
    CelebrityDetailView,
    FanDashboardView,
    HomeListingView,
    ViewContext,
)
from fanhub.main import app
from fanhub.schemas.auth import Role
from fanhub.schemas.celebrities import CreateCelebrityRequest
from fanhub.schemas.follows import FailureKind
from fanhub.services.backend import BackendService
from tests.utils import API_BASE_URL


@pytest.fixture
def seeded_celebrities(store):
    """Three celebrities created directly in the reference store."""
    return [
        store.create_celebrity({"name": "Taylor Swift", "category": "Singer, Songwriter", "country": "USA"}),
        store.create_celebrity({"name": "Shah Rukh Khan", "category": ["Actor"], "country": "India"}),
        store.create_celebrity({"name": "Simone Biles", "category": ["Athlete"], "country": "USA"}),
    ]


def user_id(store, username: str) -> str:
    return store.get_user_by_username(username)["id"]


def second_client() -> tuple[SessionStore, BackendService]:
    session = SessionStore({})
    return session, BackendService(session, base_url=API_BASE_URL, transport=httpx.ASGITransport(app=app))


@pytest.mark.asyncio
async def test_fan_signs_up_follows_and_unfollows(store, asgi_session, asgi_backend, seeded_celebrities):
    """Test the complete follow journey is mirrored by the backend."""
    taylor, srk, _ = seeded_celebrities

    identity = await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    registry = FollowStateRegistry(asgi_session, asgi_backend)
    assert await registry.initialize() == frozenset()

    outcome = await registry.toggle(taylor["id"])
    assert outcome.ok and outcome.following
    outcome = await registry.toggle(srk["id"])
    assert outcome.ok

    assert store.is_following(identity.id, taylor["id"])
    assert store.is_following(identity.id, srk["id"])
    assert registry.followed_ids() == {taylor["id"], srk["id"]}

    outcome = await registry.toggle(taylor["id"])
    assert outcome.ok and not outcome.following
    assert not store.is_following(identity.id, taylor["id"])
    assert registry.followed_ids() == {srk["id"]}
    assert registry.pending_ids() == frozenset()


@pytest.mark.asyncio
async def test_follow_of_missing_celebrity_rolls_back(asgi_session, asgi_backend, seeded_celebrities):
    await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    registry = FollowStateRegistry(asgi_session, asgi_backend)
    await registry.initialize()

    outcome = await registry.toggle("no-such-celebrity")

    assert not outcome.ok
    assert outcome.failure is FailureKind.NETWORK_ERROR
    assert isinstance(outcome.error, NetworkError)
    assert outcome.error.status_code == 404
    assert not registry.is_following("no-such-celebrity")
    assert not registry.is_action_pending("no-such-celebrity")


@pytest.mark.asyncio
async def test_concurrent_toggles_for_different_celebrities(store, asgi_session, asgi_backend, seeded_celebrities):
    """Test toggles for distinct celebrities run side by side."""
    identity = await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    registry = FollowStateRegistry(asgi_session, asgi_backend)
    await registry.initialize()

    pending = [registry.toggle(c["id"]) for c in seeded_celebrities]
    assert registry.pending_ids() == {c["id"] for c in seeded_celebrities}
    second = await registry.toggle(seeded_celebrities[0]["id"])

    outcomes = await asyncio.gather(*pending)

    assert second.failure is FailureKind.ACTION_IN_PROGRESS
    assert all(o.ok for o in outcomes)
    assert {c["id"] for c in store.get_followed(identity.id)} == registry.followed_ids()


@pytest.mark.asyncio
async def test_refresh_after_initialize_is_idempotent(store, asgi_session, asgi_backend, seeded_celebrities):
    await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    store.follow(user_id(store, "newfan"), seeded_celebrities[1]["id"])
    registry = FollowStateRegistry(asgi_session, asgi_backend)

    initial = await registry.initialize()
    refreshed = await registry.refresh()

    assert initial == refreshed == {seeded_celebrities[1]["id"]}


@pytest.mark.asyncio
async def test_second_session_sees_follows_after_refresh(asgi_session, asgi_backend, seeded_celebrities):
    """Test two sessions of the same user converge through refresh."""
    await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    first = FollowStateRegistry(asgi_session, asgi_backend)
    await first.initialize()

    other_session, other_backend = second_client()
    await auth.sign_in("newfan", "secret1", Role.FAN, other_session, other_backend)
    second = FollowStateRegistry(other_session, other_backend)
    await second.initialize()

    await first.toggle(seeded_celebrities[2]["id"])
    assert not second.is_following(seeded_celebrities[2]["id"])

    await second.refresh()
    assert second.is_following(seeded_celebrities[2]["id"])


@pytest.mark.asyncio
async def test_sign_out_then_sign_in_as_other_fan(store, asgi_session, asgi_backend, seeded_celebrities):
    await auth.sign_up("alice", "secret1", Role.FAN, asgi_session, asgi_backend)
    registry = FollowStateRegistry(asgi_session, asgi_backend)
    await registry.initialize()
    await registry.toggle(seeded_celebrities[0]["id"])

    auth.sign_out(asgi_session, registry)
    await auth.sign_up("bobby", "secret1", Role.FAN, asgi_session, asgi_backend)
    await registry.initialize()

    assert registry.followed_ids() == frozenset()
    assert store.is_following(user_id(store, "alice"), seeded_celebrities[0]["id"])


@pytest.mark.asyncio
async def test_views_share_follow_state_against_backend(asgi_session, asgi_backend, seeded_celebrities):
    """Test listing, detail and dashboard views agree after a toggle."""
    await auth.sign_up("newfan", "secret1", Role.FAN, asgi_session, asgi_backend)
    context = ViewContext(asgi_session, backend=asgi_backend)
    taylor = seeded_celebrities[0]

    home = HomeListingView(context)
    await home.mount()
    assert len(home.cards()) == 3
    assert home.cards(category="Songwriter")[0].record.name == "Taylor Swift"

    outcome = await home.toggle_follow(taylor["id"])
    assert outcome.ok

    detail = CelebrityDetailView(context, taylor["id"])
    await detail.mount()
    assert detail.following

    dashboard = FanDashboardView(context)
    await dashboard.mount()
    assert [c.record.id for c in dashboard.followed_cards()] == [taylor["id"]]
    assert await detail.check_following() is True

    await dashboard.unfollow(taylor["id"])
    assert not detail.following
    assert dashboard.followed_cards() == []


@pytest.mark.asyncio
async def test_guest_browses_but_cannot_follow(asgi_session, asgi_backend, seeded_celebrities):
    context = ViewContext(asgi_session, backend=asgi_backend)
    home = HomeListingView(context)

    await home.mount()
    outcome = await home.toggle_follow(seeded_celebrities[0]["id"])

    assert len(home.cards()) == 3
    assert outcome.failure is FailureKind.UNAUTHORIZED


@pytest.mark.asyncio
async def test_celebrity_creates_profile(store, asgi_session, asgi_backend):
    await auth.sign_up("Beyonce", "secret1", Role.CELEBRITY, asgi_session, asgi_backend)
    context = ViewContext(asgi_session, backend=asgi_backend)
    view = CelebrityDashboardView(context)
    await view.mount()
    assert view.profile is None

    created = await view.create_profile(
        CreateCelebrityRequest(name="Beyonce", category="Singer", country="USA", fanbase_count=5000)
    )

    assert view.profile == created
    assert created.user_id == user_id(store, "Beyonce")
    assert created.category == ("Singer",)
