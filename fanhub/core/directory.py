import logging
from typing import Any

from pydantic import ValidationError

from fanhub.core.errors import NetworkError
from fanhub.schemas.celebrities import CelebrityRecord
from fanhub.services.backend import BackendService

logger = logging.getLogger(__name__)


def parse_celebrities(payload: Any) -> list[CelebrityRecord]:
    """Validate a celebrity listing, dropping records that fail the schema."""
    if not isinstance(payload, list):
        raise NetworkError(f"Expected a list of celebrities, got {type(payload).__name__}")

    records = []
    for index, item in enumerate(payload):
        try:
            records.append(CelebrityRecord.model_validate(item))
        except ValidationError as e:
            logger.warning(
                "Skipping invalid celebrity record at index %s: %s error(s)", index, e.error_count()
            )
    return records


class DirectoryCache:
    """Read-through cache of every known celebrity record."""

    def __init__(self, backend: BackendService):
        self.backend = backend
        self._records: list[CelebrityRecord] = []
        self._by_id: dict[str, CelebrityRecord] = {}
        self._loaded = False
        self._load_seq = 0

    @property
    def records(self) -> list[CelebrityRecord]:
        return list(self._records)

    @property
    def loaded(self) -> bool:
        return self._loaded

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, celebrity_id: object) -> bool:
        return celebrity_id in self._by_id

    async def load_all(self) -> list[CelebrityRecord]:
        """Fetch the full listing and replace the cache contents.

        When loads overlap only the most recently issued one commits; an
        older response that arrives later is returned to its caller but
        not stored.
        """
        self._load_seq += 1
        seq = self._load_seq

        payload = await self.backend.list_celebrities()
        records = parse_celebrities(payload)

        if seq != self._load_seq:
            logger.debug("Discarding superseded celebrity listing (load %s)", seq)
            return records

        by_id: dict[str, CelebrityRecord] = {}
        for record in records:
            # Keep the first record for a duplicated id, same as name lookup
            by_id.setdefault(record.id, record)
        self._records = records
        self._by_id = by_id
        self._loaded = True
        logger.info("Directory loaded with %s celebrities", len(records))
        return list(records)

    def get(self, celebrity_id: str) -> CelebrityRecord | None:
        return self._by_id.get(celebrity_id)

    def find_by_name(self, name: str) -> CelebrityRecord | None:
        """Case-insensitive exact name match; the first match wins."""
        wanted = name.casefold()
        for record in self._records:
            if record.name.casefold() == wanted:
                return record
        return None

    def filter(self, search: str = "", category: str = "", country: str = "") -> list[CelebrityRecord]:
        """Filter the listing the way the home page search box does."""
        term = search.casefold()
        results = []
        for record in self._records:
            matches_search = (
                term in record.name.casefold()
                or any(term in c.casefold() for c in record.category)
                or term in record.country.casefold()
            )
            matches_category = not category or category in record.category
            matches_country = not country or record.country.casefold() == country.casefold()
            if matches_search and matches_category and matches_country:
                results.append(record)
        return results

    def categories(self) -> list[str]:
        """Distinct categories in first-seen order."""
        return list(dict.fromkeys(c for record in self._records for c in record.category))

    def countries(self) -> list[str]:
        """Distinct countries in first-seen order."""
        return list(dict.fromkeys(r.country for r in self._records if r.country))
