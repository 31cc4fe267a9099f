from datetime import datetime
from typing import Optional

from pydantic import (
    AnyUrl,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    field_validator,
)
from pydantic.alias_generators import to_camel


class CelebrityRecord(BaseModel):
    """A celebrity as listed by the backend. Read-only outside the directory cache."""

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    category: tuple[str, ...]
    country: str
    fanbase_count: Optional[NonNegativeInt] = None
    description: Optional[str] = None
    instagram_handle: Optional[str] = None
    youtube_channel: Optional[str] = None
    spotify_id: Optional[str] = None
    imdb_id: Optional[str] = None
    profile_image_url: Optional[AnyUrl] = None
    sample_setlist_or_keynote_topics: Optional[list[str]] = None
    user_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("category", mode="before")
    @classmethod
    def ordered_categories(cls, v):
        # A bare string is a single category; duplicates keep their first position
        if isinstance(v, str):
            v = [v]
        if not isinstance(v, (list, tuple)):
            return v
        seen = []
        for item in v:
            if isinstance(item, str) and item and item not in seen:
                seen.append(item)
        return tuple(seen)

    @field_validator("profile_image_url", mode="before")
    @classmethod
    def empty_url_is_absent(cls, v):
        if v == "":
            return None
        return v


class CreateCelebrityRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = Field(min_length=1)
    category: str = Field(min_length=1)
    country: str = Field(min_length=1)
    fanbase_count: int = Field(ge=1000)
    description: Optional[str] = None
    profile_image_url: Optional[AnyUrl] = None
    instagram_handle: Optional[str] = None
    youtube_channel: Optional[str] = None
    spotify_id: Optional[str] = None
    imdb_id: Optional[str] = None
    sample_setlist_or_keynote_topics: Optional[str] = None

    @field_validator("profile_image_url", mode="before")
    @classmethod
    def empty_url_is_absent(cls, v):
        if v == "":
            return None
        return v


class CelebrityDraft(BaseModel):
    """Suggested profile data returned by the autofill endpoint."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    category: list[str] = Field(min_length=1)
    country: str = Field(min_length=1)
    description: Optional[str] = None
    profile_image_url: Optional[AnyUrl] = None
    instagram_handle: Optional[str] = None
    youtube_channel: Optional[str] = None
    spotify_id: Optional[str] = None
    imdb_id: Optional[str] = None
    fanbase_count: int = Field(ge=1000)
    sample_setlist_or_keynote_topics: Optional[list[str]] = None

    @field_validator("category", mode="before")
    @classmethod
    def single_category(cls, v):
        if isinstance(v, str):
            return [v] if v else []
        return v

    @field_validator("profile_image_url", mode="before")
    @classmethod
    def empty_url_is_absent(cls, v):
        if v == "":
            return None
        return v

    def to_create_request(self, name: Optional[str] = None) -> CreateCelebrityRequest:
        """Pre-fill a create request; list fields become comma separated text."""
        return CreateCelebrityRequest(
            name=name or self.name,
            category=", ".join(self.category),
            country=self.country,
            fanbase_count=self.fanbase_count,
            description=self.description,
            profile_image_url=self.profile_image_url,
            instagram_handle=self.instagram_handle,
            youtube_channel=self.youtube_channel,
            spotify_id=self.spotify_id,
            imdb_id=self.imdb_id,
            sample_setlist_or_keynote_topics=", ".join(self.sample_setlist_or_keynote_topics or []) or None,
        )


class FollowedCelebrity(BaseModel):
    """Minimal shape required from the followed-celebrities endpoint."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(min_length=1)
