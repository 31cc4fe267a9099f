"""
Follow-state registry: the current user's followed celebrities plus the
per-celebrity in-flight tracker shared by every view.

Membership is updated optimistically when a toggle is dispatched and rolled
back if the request fails. At most one follow/unfollow request per celebrity
is in flight; a second intent for the same celebrity is rejected, not queued.
All state lives on one event loop, so the only interleaving points are the
awaits on backend calls.
"""
import asyncio
import functools
import logging
from collections.abc import Awaitable
from typing import Any

from pydantic import ValidationError

from fanhub.core.errors import ActionInProgress, FanHubError, NetworkError, Unauthorized
from fanhub.core.session import SessionStore
from fanhub.schemas.auth import Identity
from fanhub.schemas.celebrities import FollowedCelebrity
from fanhub.schemas.follows import ActionKind, ActionToken, ToggleOutcome
from fanhub.services.backend import BackendService

logger = logging.getLogger(__name__)


def parse_followed_ids(payload: Any) -> set[str]:
    """Extract celebrity ids from a followed-celebrities payload.

    Entries without a usable id are skipped; a payload that is not a list
    is a backend error.
    """
    if not isinstance(payload, list):
        raise NetworkError(f"Expected a list of followed celebrities, got {type(payload).__name__}")

    ids = set()
    for item in payload:
        try:
            ids.add(FollowedCelebrity.model_validate(item).id)
        except ValidationError:
            logger.warning("Skipping followed celebrity without a valid id: %r", item)
    return ids


class FollowStateRegistry:
    def __init__(self, session: SessionStore, backend: BackendService):
        self.session = session
        self.backend = backend
        self._identity: Identity | None = None
        self._initialized = False
        self._followed: set[str] = set()
        self._pending: dict[str, ActionToken] = {}
        # Bumped on initialize/reset so requests from an older session never
        # write into the current one.
        self._generation = 0
        self._fetch_seq = 0
        self._settle_seq = 0
        # Celebrity id -> settle sequence number of its latest finished toggle
        self._settled_at: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()
        self.last_error: FanHubError | None = None

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def initialized(self) -> bool:
        return self._initialized

    def initialized_for(self, identity: Identity | None) -> bool:
        """True once initialize has run for this exact identity."""
        return self._initialized and identity is not None and self._identity == identity

    # Reads
    def is_following(self, celebrity_id: str) -> bool:
        return celebrity_id in self._followed

    def is_action_pending(self, celebrity_id: str) -> bool:
        return celebrity_id in self._pending

    def pending_action(self, celebrity_id: str) -> ActionToken | None:
        return self._pending.get(celebrity_id)

    def followed_ids(self) -> frozenset[str]:
        return frozenset(self._followed)

    def pending_ids(self) -> frozenset[str]:
        return frozenset(self._pending)

    # Lifecycle
    def reset(self) -> None:
        """Discard all follow state, e.g. on logout."""
        self._generation += 1
        self._identity = None
        self._initialized = False
        self._followed = set()
        self._pending = {}
        self._settled_at = {}
        self.last_error = None

    async def initialize(self, identity: Identity | None = None) -> frozenset[str]:
        """Load the authoritative follow set for a new session.

        Non-fan or missing identities get an empty set and cannot toggle.
        If the fetch fails the registry is still initialized with an empty
        set, ``last_error`` is recorded and NetworkError is raised.
        """
        identity = identity if identity is not None else self.session.identity
        self.reset()
        self._identity = identity

        if identity is None or not identity.is_fan:
            self._initialized = True
            return frozenset()

        generation = self._generation
        try:
            ids = await self._fetch_followed_ids()
        except FanHubError as e:
            if generation == self._generation:
                self._initialized = True
                self.last_error = e
            logger.warning("Initial follow state fetch failed for %s: %s", identity.id, e)
            if isinstance(e, NetworkError):
                raise
            raise NetworkError(str(e)) from e

        if generation != self._generation:
            logger.debug("Discarding follow state for superseded session %s", identity.id)
            return frozenset(ids)

        self._followed = ids
        self._initialized = True
        logger.info("Follow state initialized for %s with %s celebrities", identity.id, len(ids))
        return frozenset(self._followed)

    async def refresh(self) -> frozenset[str]:
        """Re-fetch the follow set and replace it wholesale.

        Celebrities with a request in flight, or whose request settled while
        the fetch was outstanding, keep their local value. On failure the
        current set is kept.
        """
        identity = self._identity
        if not self._initialized or identity is None or not identity.is_fan:
            return frozenset(self._followed)

        generation = self._generation
        self._fetch_seq += 1
        seq = self._fetch_seq
        # The snapshot may predate these toggles, so their local value wins
        local = set(self._pending)
        settle_mark = self._settle_seq
        try:
            ids = await self._fetch_followed_ids()
        except FanHubError as e:
            self.last_error = e
            logger.warning("Follow state refresh failed for %s: %s", identity.id, e)
            if isinstance(e, NetworkError):
                raise
            raise NetworkError(str(e)) from e

        if generation != self._generation or seq != self._fetch_seq:
            logger.debug("Discarding stale follow state refresh %s", seq)
            return frozenset(self._followed)

        local.update(self._pending)
        local.update(cid for cid, settled in self._settled_at.items() if settled > settle_mark)
        for celebrity_id in local:
            if celebrity_id in self._followed:
                ids.add(celebrity_id)
            else:
                ids.discard(celebrity_id)
        self._followed = ids
        self.last_error = None
        return frozenset(self._followed)

    async def _fetch_followed_ids(self) -> set[str]:
        payload = await self.backend.get_followed_celebrities()
        return parse_followed_ids(payload)

    # Toggle
    def toggle(self, celebrity_id: str) -> Awaitable[ToggleOutcome]:
        """Flip follow membership for a celebrity.

        The precondition checks, the in-flight token and the optimistic flip
        all happen before this call returns. The returned awaitable resolves
        to a ToggleOutcome once the backend request settles. Must be called
        from a running event loop.
        """
        loop = asyncio.get_running_loop()

        rejection = self._check_toggle(celebrity_id)
        if rejection is not None:
            done = loop.create_future()
            done.set_result(
                ToggleOutcome.failed(celebrity_id, self.is_following(celebrity_id), rejection)
            )
            return done

        was_following = self.is_following(celebrity_id)
        kind = ActionKind.UNFOLLOW if was_following else ActionKind.FOLLOW
        token = ActionToken(celebrity_id=celebrity_id, kind=kind)
        self._pending[celebrity_id] = token
        self._set_following(celebrity_id, not was_following)
        logger.debug("Dispatched %s for %s", kind.value, celebrity_id)

        generation = self._generation
        task = loop.create_task(self._settle(celebrity_id, kind, was_following, generation))
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._on_task_done, token, was_following, generation))
        return task

    def _set_following(self, celebrity_id: str, following: bool) -> None:
        if following:
            self._followed.add(celebrity_id)
        else:
            self._followed.discard(celebrity_id)

    def _release(self, celebrity_id: str) -> None:
        self._pending.pop(celebrity_id, None)
        self._settle_seq += 1
        self._settled_at[celebrity_id] = self._settle_seq

    def _on_task_done(
        self, token: ActionToken, was_following: bool, generation: int, task: asyncio.Task
    ) -> None:
        """Release the token of a toggle whose task was cancelled mid-request."""
        self._tasks.discard(task)
        if not task.cancelled():
            return
        celebrity_id = token.celebrity_id
        if generation != self._generation or self._pending.get(celebrity_id) is not token:
            return
        self._release(celebrity_id)
        self._set_following(celebrity_id, was_following)
        logger.warning("%s of %s cancelled, rolled back", token.kind.value.capitalize(), celebrity_id)

    def _check_toggle(self, celebrity_id: str) -> FanHubError | None:
        identity = self._identity
        if identity is None or self.session.identity is None or not self.session.credential:
            return Unauthorized("Please log in as a fan to follow celebrities.")
        if not identity.is_fan:
            return Unauthorized("Only fans can follow celebrities.")
        if not self._initialized:
            return Unauthorized("Follow state has not been initialized for this session.")
        if celebrity_id in self._pending:
            return ActionInProgress(f"A follow update for {celebrity_id} is already in progress.")
        return None

    async def _settle(
        self, celebrity_id: str, kind: ActionKind, was_following: bool, generation: int
    ) -> ToggleOutcome:
        try:
            if kind is ActionKind.FOLLOW:
                await self.backend.follow_celebrity(celebrity_id)
            else:
                await self.backend.unfollow_celebrity(celebrity_id)
        except FanHubError as e:
            error = e
        except Exception as e:
            logger.exception("Unexpected error during %s of %s", kind.value, celebrity_id)
            error = NetworkError(str(e))
        else:
            error = None

        if generation != self._generation:
            # The session changed while the request was in flight
            logger.debug("Dropping %s result for %s from a previous session", kind.value, celebrity_id)
            following = not was_following if error is None else was_following
            if error is None:
                return ToggleOutcome.success(celebrity_id, following)
            return ToggleOutcome.failed(celebrity_id, following, error)

        self._release(celebrity_id)

        if error is None:
            following = not was_following
            logger.info("%s of %s confirmed", kind.value.capitalize(), celebrity_id)
            return ToggleOutcome.success(celebrity_id, following)

        self._set_following(celebrity_id, was_following)
        logger.warning("%s of %s failed, rolled back: %s", kind.value.capitalize(), celebrity_id, error)
        return ToggleOutcome.failed(celebrity_id, was_following, error)
