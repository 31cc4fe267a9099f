"""
Session store for the signed-in identity and its bearer credential.

The store is backed by any string-keyed mutable mapping so the same code
runs against a plain dict, Streamlit's session state, or a JSON file on
disk. Persisted records are validated on restore and discarded when they
are partial or malformed.
"""
import json
import logging
from collections.abc import Iterator, MutableMapping
from pathlib import Path

from pydantic import ValidationError

from fanhub.core.errors import DataIntegrityError
from fanhub.schemas.auth import Identity

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
USER_KEY = "user"


class JsonFileStorage(MutableMapping):
    """A string mapping persisted to a single JSON file.

    Every write rewrites the file; reads come from the copy loaded at
    construction.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self._data: dict[str, str] = {}
        if self.path.exists():
            try:
                loaded = json.loads(self.path.read_text(encoding="utf-8"))
            except (OSError, ValueError):
                logger.warning("Ignoring unreadable session file %s", self.path)
                loaded = {}
            if isinstance(loaded, dict):
                self._data = {k: v for k, v in loaded.items() if isinstance(v, str)}

    def _flush(self) -> None:
        self.path.write_text(json.dumps(self._data), encoding="utf-8")

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value
        self._flush()

    def __delitem__(self, key: str) -> None:
        del self._data[key]
        self._flush()

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)


class SessionStore:
    """Current identity plus the credential attached to backend requests."""

    def __init__(self, storage: MutableMapping | None = None):
        self._storage = storage if storage is not None else {}
        self._identity: Identity | None = None
        self._credential: str | None = None

    @property
    def identity(self) -> Identity | None:
        return self._identity

    @property
    def credential(self) -> str | None:
        return self._credential

    @property
    def is_authenticated(self) -> bool:
        return self._identity is not None and bool(self._credential)

    @property
    def is_fan(self) -> bool:
        return self.is_authenticated and self._identity.is_fan

    def auth_headers(self) -> dict[str, str]:
        if not self._credential:
            return {}
        return {"Authorization": f"Bearer {self._credential}"}

    def restore(self) -> Identity | None:
        """Load the persisted session, failing closed on anything malformed."""
        token = self._storage.get(TOKEN_KEY)
        raw_user = self._storage.get(USER_KEY)

        if token is None and raw_user is None:
            logger.info("No persisted session found, running as guest")
            self._identity = None
            self._credential = None
            return None

        try:
            identity = self._parse_persisted(token, raw_user)
        except DataIntegrityError as e:
            logger.warning("Discarding persisted session: %s", e)
            self.clear()
            return None

        self._identity = identity
        self._credential = token
        logger.info("Restored session for %s (%s)", identity.id, identity.role.value)
        return identity

    @staticmethod
    def _parse_persisted(token, raw_user) -> Identity:
        if not isinstance(token, str) or not token:
            raise DataIntegrityError("missing credential")
        if not isinstance(raw_user, str) or not raw_user:
            raise DataIntegrityError("missing identity record")
        try:
            return Identity.model_validate_json(raw_user)
        except ValidationError as e:
            raise DataIntegrityError(f"invalid identity record ({e.error_count()} errors)") from e

    def establish(self, identity: Identity, credential: str) -> None:
        """Persist a freshly authenticated identity and credential."""
        if not credential:
            raise DataIntegrityError("credential must not be empty")
        self._storage[TOKEN_KEY] = credential
        self._storage[USER_KEY] = identity.model_dump_json(by_alias=True)
        self._identity = identity
        self._credential = credential
        logger.info("Session established for %s (%s)", identity.id, identity.role.value)

    def clear(self) -> None:
        """Forget the identity and credential, persisted and in memory."""
        for key in (TOKEN_KEY, USER_KEY):
            if key in self._storage:
                del self._storage[key]
        self._identity = None
        self._credential = None
        logger.info("Session cleared")
