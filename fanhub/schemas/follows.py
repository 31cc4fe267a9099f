from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ActionKind(str, Enum):
    FOLLOW = "follow"
    UNFOLLOW = "unfollow"


class FailureKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    ACTION_IN_PROGRESS = "action_in_progress"
    NETWORK_ERROR = "network_error"


class ActionToken(BaseModel):
    """Marks one in-flight follow or unfollow request."""

    model_config = ConfigDict(frozen=True)

    celebrity_id: str
    kind: ActionKind


class ToggleOutcome(BaseModel):
    """Settled result of a follow toggle.

    ``following`` is the membership after settlement: the flipped value on
    success, the pre-toggle value on failure.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    celebrity_id: str
    ok: bool
    following: bool
    failure: FailureKind | None = None
    error: Exception | None = Field(default=None, exclude=True)
    message: str | None = None

    @classmethod
    def success(cls, celebrity_id: str, following: bool) -> "ToggleOutcome":
        return cls(celebrity_id=celebrity_id, ok=True, following=following)

    @classmethod
    def failed(cls, celebrity_id: str, following: bool, error: Exception) -> "ToggleOutcome":
        return cls(
            celebrity_id=celebrity_id,
            ok=False,
            following=following,
            failure=getattr(error, "kind", None) or FailureKind.NETWORK_ERROR,
            error=error,
            message=str(error),
        )


class FollowStatusResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_following: bool = Field(alias="isFollowing")


class FollowResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: str = Field(alias="userId")
    celebrity_id: str = Field(alias="celebrityId")
