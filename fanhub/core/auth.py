import logging
from typing import Any

import jwt

from fanhub.core.errors import NetworkError
from fanhub.core.follows import FollowStateRegistry
from fanhub.core.session import SessionStore
from fanhub.schemas.auth import Identity, Role, SigninRequest, SignupRequest
from fanhub.services.backend import BackendService

logger = logging.getLogger(__name__)


def decode_token_payload(token: str) -> dict[str, Any] | None:
    """Read the claims of an access token without verifying its signature.

    Verification is the backend's job; the client only needs the identity
    fields.
    """
    try:
        return jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        logger.warning("Could not decode access token payload")
        return None


def identity_from_token(token: str, role: Role | str) -> Identity:
    payload = decode_token_payload(token)
    if not payload or not payload.get("userId") or not payload.get("username"):
        raise NetworkError("Invalid token received from backend. Missing userId or username in payload.")
    return Identity(id=str(payload["userId"]), display_name=str(payload["username"]), role=Role(role))


async def sign_in(
    username: str,
    password: str,
    role: Role | str,
    session: SessionStore,
    backend: BackendService,
) -> Identity:
    """Sign in and establish the session for the chosen role."""
    credentials = SigninRequest(username=username, password=password)
    token = await backend.sign_in(credentials)
    identity = identity_from_token(token.access_token, role)
    session.establish(identity, token.access_token)
    return identity


async def sign_up(
    username: str,
    password: str,
    role: Role | str,
    session: SessionStore,
    backend: BackendService,
) -> Identity:
    """Register a new account and establish the session for it."""
    credentials = SignupRequest(username=username, password=password)
    token = await backend.sign_up(credentials)
    identity = identity_from_token(token.access_token, role)
    session.establish(identity, token.access_token)
    return identity


def sign_out(session: SessionStore, registry: FollowStateRegistry | None = None) -> None:
    """Clear the session and drop any follow state tied to it."""
    session.clear()
    if registry is not None:
        registry.reset()
