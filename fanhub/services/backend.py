import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from fanhub.core.config import settings
from fanhub.core.errors import NetworkError, Unauthorized
from fanhub.core.session import SessionStore
from fanhub.schemas.auth import SigninRequest, SignupRequest, TokenResponse
from fanhub.schemas.celebrities import CelebrityDraft

logger = logging.getLogger(__name__)


class BackendService:
    def __init__(
        self,
        session: SessionStore,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize the backend client.

        A fresh ``httpx.AsyncClient`` is opened per request so the service can
        be shared between separate ``asyncio.run`` calls.
        """
        self.session = session
        self.base_url = (base_url or settings.API_BASE_URL).rstrip("/")
        self.transport = transport
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT

    async def _request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        headers = {"Content-Type": "application/json"}
        if authenticated and not self.session.credential:
            raise Unauthorized(f"{method} {path} requires a signed-in user")
        headers.update(self.session.auth_headers())

        try:
            async with httpx.AsyncClient(
                base_url=self.base_url, transport=self.transport, timeout=self.timeout
            ) as client:
                response = await client.request(
                    method, path, headers=headers, json=json, params=params
                )
        except httpx.HTTPError as e:
            logger.warning("%s %s failed: %s", method, path, e)
            raise NetworkError(f"{method} {path} failed: {e}") from e
        return response

    @staticmethod
    def _error_message(response: httpx.Response, fallback: str) -> str:
        try:
            body = response.json()
        except ValueError:
            return f"{fallback}: {response.reason_phrase or response.status_code}"
        if isinstance(body, dict):
            message = body.get("message") or body.get("detail")
            if isinstance(message, str) and message:
                return message
        return fallback

    def _raise_for_status(self, response: httpx.Response, fallback: str) -> None:
        if response.is_success:
            return
        message = self._error_message(response, fallback)
        if response.status_code == 401:
            raise Unauthorized(message)
        raise NetworkError(message, status_code=response.status_code)

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise NetworkError(
                f"Malformed response body from {response.request.url}", response.status_code
            ) from e

    # Authentication
    async def sign_up(self, credentials: SignupRequest) -> TokenResponse:
        """Register a new user and return its access token."""
        response = await self._request(
            "POST", "/auth/signup", authenticated=False, json=credentials.model_dump()
        )
        self._raise_for_status(response, "Signup failed")
        return self._token(response)

    async def sign_in(self, credentials: SigninRequest) -> TokenResponse:
        """Authenticate and return an access token."""
        response = await self._request(
            "POST", "/auth/signin", authenticated=False, json=credentials.model_dump()
        )
        self._raise_for_status(response, "Signin failed")
        return self._token(response)

    def _token(self, response: httpx.Response) -> TokenResponse:
        body = self._json(response)
        if not isinstance(body, dict) or not body.get("accessToken"):
            raise NetworkError("Token missing from authentication response", response.status_code)
        try:
            return TokenResponse.model_validate(body)
        except ValidationError as e:
            raise NetworkError("Malformed authentication response", response.status_code) from e

    # Celebrity operations
    async def list_celebrities(self) -> List[Dict[str, Any]]:
        """Get every celebrity record as raw JSON objects."""
        response = await self._request("GET", "/celebrities", authenticated=False)
        self._raise_for_status(response, "Failed to fetch celebrities")
        return self._json(response)

    async def get_celebrity(self, celebrity_id: str) -> Dict[str, Any]:
        """Get a single celebrity record."""
        response = await self._request("GET", f"/celebrities/{celebrity_id}", authenticated=False)
        self._raise_for_status(response, "Failed to fetch celebrity details by ID")
        return self._json(response)

    async def create_celebrity(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Create a celebrity record."""
        response = await self._request("POST", "/celebrities", json=data)
        self._raise_for_status(response, "Failed to create celebrity")
        return self._json(response)

    # Profile assistance
    async def suggest_celebrities(self, query: str) -> List[str]:
        """Get celebrity names matching a partial query."""
        response = await self._request(
            "GET", "/ai/suggest-celebrities", authenticated=False, params={"q": query}
        )
        self._raise_for_status(response, "Failed to fetch AI suggestions")
        body = self._json(response)
        if not isinstance(body, list) or not all(isinstance(name, str) for name in body):
            raise NetworkError("Malformed suggestions response", response.status_code)
        return body

    async def autofill_celebrity(self, name: str) -> CelebrityDraft:
        """Get suggested profile data for a celebrity name."""
        response = await self._request(
            "GET", f"/ai/autofill-celebrity/{quote(name, safe='')}", authenticated=False
        )
        self._raise_for_status(response, "Failed to autofill celebrity data")
        try:
            return CelebrityDraft.model_validate(self._json(response))
        except ValidationError as e:
            raise NetworkError("Malformed autofill response", response.status_code) from e

    # Follow operations
    async def get_followed_celebrities(self) -> List[Dict[str, Any]]:
        """Get the celebrities the current user follows."""
        response = await self._request("GET", "/follows")
        self._raise_for_status(response, "Failed to fetch followed celebrities")
        return self._json(response)

    async def follow_celebrity(self, celebrity_id: str) -> Dict[str, Any]:
        """Follow a celebrity as the current user."""
        response = await self._request("POST", f"/follows/{celebrity_id}")
        self._raise_for_status(response, "Failed to follow celebrity")
        return self._json(response)

    async def unfollow_celebrity(self, celebrity_id: str) -> None:
        """Unfollow a celebrity as the current user."""
        response = await self._request("DELETE", f"/follows/{celebrity_id}")
        self._raise_for_status(response, "Failed to unfollow celebrity")

    async def is_following(self, celebrity_id: str) -> bool:
        """Check the follow status; missing session or record counts as not following."""
        if not self.session.credential:
            return False
        response = await self._request("GET", f"/follows/status/{celebrity_id}")
        if response.status_code in (401, 404):
            return False
        self._raise_for_status(response, "Failed to check following status")
        body = self._json(response)
        if not isinstance(body, dict):
            raise NetworkError("Malformed follow status response", response.status_code)
        return bool(body.get("isFollowing", False))
