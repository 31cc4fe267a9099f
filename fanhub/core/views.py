"""
View binders: the state each page renders, independent of the UI toolkit.

Every binder reads from the same ViewContext, so the home listing, the fan
dashboard and a celebrity detail page all see one follow set and one
in-flight tracker.
"""
import logging

from pydantic import BaseModel, ConfigDict, ValidationError

from fanhub.core.directory import DirectoryCache
from fanhub.core.errors import FanHubError, NetworkError
from fanhub.core.follows import FollowStateRegistry
from fanhub.core.session import SessionStore
from fanhub.schemas.auth import Identity, Role
from fanhub.schemas.celebrities import CelebrityRecord, CreateCelebrityRequest
from fanhub.schemas.follows import FailureKind, ToggleOutcome
from fanhub.services.backend import BackendService

logger = logging.getLogger(__name__)


class ViewContext:
    """Shared collaborators for every view of one app session."""

    def __init__(
        self,
        session: SessionStore,
        backend: BackendService | None = None,
        directory: DirectoryCache | None = None,
        registry: FollowStateRegistry | None = None,
    ):
        self.session = session
        self.backend = backend if backend is not None else BackendService(session)
        self.directory = directory if directory is not None else DirectoryCache(self.backend)
        self.registry = registry if registry is not None else FollowStateRegistry(session, self.backend)
        self.session_restored = False


class CelebrityCard(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: CelebrityRecord
    following: bool
    pending: bool
    can_follow: bool


class ViewMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    level: str
    text: str


def outcome_message(outcome: ToggleOutcome, name: str) -> ViewMessage:
    """User-facing text for a settled toggle."""
    if outcome.ok:
        text = f"Now following {name}." if outcome.following else f"Unfollowed {name}."
        return ViewMessage(level="success", text=text)
    if outcome.failure is FailureKind.UNAUTHORIZED:
        return ViewMessage(level="warning", text="Please log in as a fan to follow celebrities.")
    if outcome.failure is FailureKind.ACTION_IN_PROGRESS:
        return ViewMessage(level="info", text=f"Still updating {name}, please wait.")
    return ViewMessage(
        level="error",
        text=f"Failed to update follow status for {name}: {outcome.message or 'Please try again.'}",
    )


class ViewBinder:
    needs_directory = True
    reload_directory = False

    def __init__(self, context: ViewContext):
        self.context = context
        self.error: str | None = None
        self.messages: list[ViewMessage] = []

    @property
    def identity(self) -> Identity | None:
        return self.context.session.identity

    def ensure_session(self) -> Identity | None:
        if not self.context.session_restored:
            self.context.session.restore()
            self.context.session_restored = True
        return self.context.session.identity

    async def ensure_directory(self) -> None:
        if self.context.directory.loaded and not self.reload_directory:
            return
        await self.context.directory.load_all()

    async def ensure_follow_state(self) -> None:
        """Initialize the registry once per fan identity."""
        identity = self.identity
        registry = self.context.registry
        if identity is None or not identity.is_fan:
            if registry.initialized and registry.identity is not None:
                registry.reset()
            return
        if registry.initialized_for(identity):
            return
        try:
            await registry.initialize(identity)
        except NetworkError as e:
            logger.exception("Could not load followed celebrities for %s", identity.id)
            self.messages.append(
                ViewMessage(level="error", text=f"Could not load the celebrities you follow: {e}")
            )

    async def mount(self) -> None:
        self.error = None
        self.ensure_session()
        if self.needs_directory:
            try:
                await self.ensure_directory()
            except FanHubError as e:
                logger.exception("Failed to load the celebrity directory")
                self.error = str(e)
        await self.ensure_follow_state()

    def card(self, record: CelebrityRecord) -> CelebrityCard:
        registry = self.context.registry
        return CelebrityCard(
            record=record,
            following=registry.is_following(record.id),
            pending=registry.is_action_pending(record.id),
            can_follow=self.context.session.is_fan,
        )

    def display_name(self, celebrity_id: str) -> str:
        record = self.context.directory.get(celebrity_id)
        return record.name if record else celebrity_id

    async def toggle_follow(self, celebrity_id: str) -> ToggleOutcome:
        """Forward a follow click and record the message to show for it."""
        outcome = await self.context.registry.toggle(celebrity_id)
        self.messages.append(outcome_message(outcome, self.display_name(celebrity_id)))
        return outcome


class HomeListingView(ViewBinder):
    reload_directory = True

    def cards(self, search: str = "", category: str = "", country: str = "") -> list[CelebrityCard]:
        return [self.card(r) for r in self.context.directory.filter(search, category, country)]

    def categories(self) -> list[str]:
        return self.context.directory.categories()

    def countries(self) -> list[str]:
        return self.context.directory.countries()


class FanDashboardView(ViewBinder):
    async def mount(self) -> None:
        await super().mount()
        identity = self.identity
        if identity is None or not identity.is_fan:
            self.error = "The fan dashboard is only available to fans."

    def followed_cards(self) -> list[CelebrityCard]:
        cards = []
        for celebrity_id in sorted(self.context.registry.followed_ids()):
            record = self.context.directory.get(celebrity_id)
            if record is None:
                logger.warning("Followed celebrity %s is not in the directory", celebrity_id)
                continue
            cards.append(self.card(record))
        return sorted(cards, key=lambda c: c.record.name.casefold())

    async def unfollow(self, celebrity_id: str) -> ToggleOutcome | None:
        if not self.context.registry.is_following(celebrity_id):
            return None
        return await self.toggle_follow(celebrity_id)

    async def reconcile(self) -> None:
        try:
            await self.context.registry.refresh()
        except NetworkError as e:
            self.messages.append(ViewMessage(level="error", text=f"Could not refresh: {e}"))


class CelebrityDetailView(ViewBinder):
    def __init__(self, context: ViewContext, celebrity_id: str):
        super().__init__(context)
        self.celebrity_id = celebrity_id
        self.record: CelebrityRecord | None = None

    async def mount(self) -> None:
        await super().mount()
        if not self.celebrity_id:
            self.error = "No celebrity ID provided."
            return
        self.record = self.context.directory.get(self.celebrity_id)
        if self.record is not None:
            return
        try:
            payload = await self.context.backend.get_celebrity(self.celebrity_id)
            self.record = CelebrityRecord.model_validate(payload)
        except ValidationError:
            logger.warning("Backend returned an invalid record for %s", self.celebrity_id)
            self.error = "Celebrity not found."
        except FanHubError as e:
            logger.exception("Error fetching celebrity profile %s", self.celebrity_id)
            self.error = str(e)

    @property
    def following(self) -> bool:
        return self.context.registry.is_following(self.celebrity_id)

    @property
    def pending(self) -> bool:
        return self.context.registry.is_action_pending(self.celebrity_id)

    async def check_following(self) -> bool:
        """Ask the backend directly; errors count as not following."""
        try:
            return await self.context.backend.is_following(self.celebrity_id)
        except FanHubError:
            logger.exception("Follow status check failed for %s", self.celebrity_id)
            return False


class CelebrityDashboardView(ViewBinder):
    def __init__(self, context: ViewContext):
        super().__init__(context)
        self.profile: CelebrityRecord | None = None
        self.suggestions: list[str] = []
        self.draft: CreateCelebrityRequest | None = None

    async def mount(self) -> None:
        await super().mount()
        identity = self.identity
        if identity is None or identity.role is not Role.CELEBRITY:
            self.error = "The celebrity dashboard is only available to celebrities."
            return
        if self.error:
            return
        self.profile = self.context.directory.find_by_name(identity.display_name)
        if self.profile is None:
            self.messages.append(
                ViewMessage(
                    level="info",
                    text=f'No celebrity profile found with the name "{identity.display_name}".',
                )
            )

    async def suggest(self, query: str) -> list[str]:
        """Look up celebrity names for the profile form; failures leave no suggestions."""
        self.suggestions = []
        if not query.strip():
            return self.suggestions
        try:
            self.suggestions = await self.context.backend.suggest_celebrities(query.strip())
        except FanHubError as e:
            logger.warning("Celebrity suggestions for %r failed: %s", query, e)
            self.messages.append(ViewMessage(level="error", text=str(e)))
        return self.suggestions

    async def prefill(self, name: str | None = None) -> CreateCelebrityRequest | None:
        """Fetch suggested profile data to pre-fill the create form.

        The draft keeps the signed-in celebrity's display name so the new
        record is found by the dashboard afterwards. On failure the draft
        is cleared and an error message is recorded.
        """
        identity = self.identity
        name = name or (identity.display_name if identity is not None else None)
        self.draft = None
        if not name:
            return None
        try:
            suggested = await self.context.backend.autofill_celebrity(name)
            display_name = identity.display_name if identity is not None else None
            self.draft = suggested.to_create_request(name=display_name)
        except FanHubError as e:
            logger.warning("Autofill for %r failed: %s", name, e)
            self.messages.append(ViewMessage(level="error", text=str(e)))
        return self.draft

    async def create_profile(self, request: CreateCelebrityRequest | None = None) -> CelebrityRecord:
        """Create the signed-in celebrity's record and reload the directory.

        Without an explicit request the pre-filled draft is submitted.
        """
        request = request or self.draft
        if request is None:
            raise NetworkError("No profile data to submit; fill in the form or autofill it first.")
        payload = await self.context.backend.create_celebrity(
            request.model_dump(mode="json", by_alias=True, exclude_none=True)
        )
        try:
            created = CelebrityRecord.model_validate(payload)
        except ValidationError as e:
            raise NetworkError("Malformed celebrity returned by backend") from e
        await self.context.directory.load_all()
        identity = self.identity
        if identity is not None:
            self.profile = self.context.directory.find_by_name(identity.display_name) or created
        return created
