"""
Shared test utilities and helpers for the FanHub test suite.

This module contains sample data, a scripted backend stand-in and common
assertions used across unit, api and integration tests.
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from fanhub.core.errors import NetworkError
from fanhub.core.session import TOKEN_KEY, USER_KEY
from fanhub.schemas.auth import Identity, Role
from fanhub.schemas.celebrities import CelebrityDraft

# Common test constants
FAN_IDENTITY = Identity(id="fan-1", display_name="Fan One", role=Role.FAN)
CELEBRITY_IDENTITY = Identity(id="celeb-user-1", display_name="Taylor Swift", role=Role.CELEBRITY)
TEST_TOKEN = "header.payload.signature"
API_BASE_URL = "http://testserver/api/v1"

SAMPLE_CELEBRITIES: List[Dict[str, Any]] = [
    {
        "id": "c1",
        "name": "Taylor Swift",
        "category": ["Singer", "Songwriter"],
        "country": "USA",
        "fanbaseCount": 100_000_000,
        "profileImageUrl": "https://example.com/taylor.jpg",
    },
    {
        "id": "c2",
        "name": "Shah Rukh Khan",
        "category": ["Actor"],
        "country": "India",
        "fanbaseCount": 50_000_000,
    },
    {
        "id": "c3",
        "name": "Bad Bunny",
        "category": "Singer",
        "country": "Puerto Rico",
    },
    {
        "id": "c4",
        "name": "Simone Biles",
        "category": ["Athlete"],
        "country": "usa",
        "fanbaseCount": 5_000_000,
        "profileImageUrl": "",
    },
]

SAMPLE_CREATE_CELEBRITY = {
    "name": "Taylor Swift",
    "category": "Singer",
    "country": "USA",
    "fanbaseCount": 100000,
    "description": "Singer-songwriter",
    "profileImageUrl": "https://example.com/taylor.jpg",
}


def persisted_session(identity: Identity = FAN_IDENTITY, token: str = TEST_TOKEN) -> Dict[str, str]:
    """Storage contents as SessionStore.establish writes them."""
    return {TOKEN_KEY: token, USER_KEY: identity.model_dump_json(by_alias=True)}


def raw_session(user: Any, token: Optional[str] = TEST_TOKEN) -> Dict[str, str]:
    """Storage contents with an arbitrary user record."""
    storage = {USER_KEY: user if isinstance(user, str) else json.dumps(user)}
    if token is not None:
        storage[TOKEN_KEY] = token
    return storage


class FakeBackend:
    """
    Scripted stand-in for BackendService.

    Follow and unfollow requests can be held open with ``hold`` and made to
    fail with ``fail``; every call is recorded in ``calls`` as a
    ``(operation, celebrity_id)`` tuple.
    """

    def __init__(
        self,
        celebrities: Optional[List[Dict[str, Any]]] = None,
        followed: Optional[List[str]] = None,
    ):
        self.celebrities = [dict(c) for c in (celebrities if celebrities is not None else SAMPLE_CELEBRITIES)]
        self.followed: List[str] = list(followed or [])
        self.calls: List[tuple] = []
        self.gates: Dict[str, asyncio.Event] = {}
        self.failures: Dict[str, Exception] = {}
        self.fetch_error: Optional[Exception] = None
        self.list_error: Optional[Exception] = None
        self.followed_payload: Optional[Any] = None
        self.remote_status: Dict[str, bool] = {}
        self.drafts: Dict[str, Dict[str, Any]] = {}
        self.assist_error: Optional[Exception] = None

    def hold(self, celebrity_id: str) -> asyncio.Event:
        """Keep the next follow/unfollow for this id pending until the event is set."""
        gate = asyncio.Event()
        self.gates[celebrity_id] = gate
        return gate

    def fail(self, celebrity_id: str, error: Optional[Exception] = None) -> None:
        self.failures[celebrity_id] = error or NetworkError("Failed to update follow", status_code=500)

    def count(self, operation: str, celebrity_id: Optional[str] = None) -> int:
        return sum(
            1 for op, cid in self.calls
            if op == operation and (celebrity_id is None or cid == celebrity_id)
        )

    async def list_celebrities(self) -> Any:
        self.calls.append(("list", None))
        if self.list_error is not None:
            raise self.list_error
        return [dict(c) for c in self.celebrities]

    async def get_celebrity(self, celebrity_id: str) -> Dict[str, Any]:
        self.calls.append(("get", celebrity_id))
        for celebrity in self.celebrities:
            if celebrity.get("id") == celebrity_id:
                return dict(celebrity)
        raise NetworkError("Celebrity not found", status_code=404)

    async def create_celebrity(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create", None))
        category = data.get("category")
        celebrity = {**data, "id": f"c{len(self.celebrities) + 1}", "category": [category]}
        self.celebrities.append(celebrity)
        return dict(celebrity)

    async def suggest_celebrities(self, query: str) -> List[str]:
        self.calls.append(("suggest", query))
        if self.assist_error is not None:
            raise self.assist_error
        return [c["name"] for c in self.celebrities if query.lower() in c["name"].lower()]

    async def autofill_celebrity(self, name: str) -> CelebrityDraft:
        self.calls.append(("autofill", name))
        if self.assist_error is not None:
            raise self.assist_error
        if name not in self.drafts:
            raise NetworkError(f"No data found for {name}", status_code=404)
        return CelebrityDraft.model_validate(self.drafts[name])

    async def get_followed_celebrities(self) -> Any:
        self.calls.append(("followed", None))
        if self.fetch_error is not None:
            raise self.fetch_error
        if self.followed_payload is not None:
            return self.followed_payload
        return [{"id": cid, "name": cid} for cid in self.followed]

    async def _settle(self, operation: str, celebrity_id: str) -> None:
        self.calls.append((operation, celebrity_id))
        gate = self.gates.pop(celebrity_id, None)
        if gate is not None:
            await gate.wait()
        error = self.failures.pop(celebrity_id, None)
        if error is not None:
            raise error

    async def follow_celebrity(self, celebrity_id: str) -> Dict[str, Any]:
        await self._settle("follow", celebrity_id)
        if celebrity_id not in self.followed:
            self.followed.append(celebrity_id)
        return {"userId": FAN_IDENTITY.id, "celebrityId": celebrity_id}

    async def unfollow_celebrity(self, celebrity_id: str) -> None:
        await self._settle("unfollow", celebrity_id)
        if celebrity_id in self.followed:
            self.followed.remove(celebrity_id)

    async def is_following(self, celebrity_id: str) -> bool:
        self.calls.append(("status", celebrity_id))
        if celebrity_id in self.remote_status:
            return self.remote_status[celebrity_id]
        return celebrity_id in self.followed


async def wait_until_settled(registry, timeout: float = 1.0) -> None:
    """Yield to the event loop until the registry has no pending actions."""
    async def _poll():
        while registry.pending_ids():
            await asyncio.sleep(0)
    await asyncio.wait_for(_poll(), timeout)


def assert_state(registry, celebrity_id: str, following: bool, pending: bool) -> None:
    assert registry.is_following(celebrity_id) is following
    assert registry.is_action_pending(celebrity_id) is pending
