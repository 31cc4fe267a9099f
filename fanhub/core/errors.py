"""
Error taxonomy shared by the client layer.

Follow-related errors carry the FailureKind a view uses to pick its
messaging; DataIntegrityError is raised only while reading a persisted
session.
"""
from fanhub.schemas.follows import FailureKind


class FanHubError(Exception):
    """Base class for all expected FanHub failures."""

    kind: FailureKind | None = None


class Unauthorized(FanHubError):
    """No session, an invalid credential, or the wrong role."""

    kind = FailureKind.UNAUTHORIZED


class ActionInProgress(FanHubError):
    """A follow/unfollow request for the same celebrity is still pending."""

    kind = FailureKind.ACTION_IN_PROGRESS


class NetworkError(FanHubError):
    """Transport failure, non-success response, or malformed payload."""

    kind = FailureKind.NETWORK_ERROR

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DataIntegrityError(FanHubError):
    """A persisted session record is partial or malformed."""
