"""
Dependency injection for the reference backend endpoints.
"""
from functools import lru_cache
from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException

from fanhub.core.security import verify_access_token
from fanhub.services.directory_store import DirectoryStore


@lru_cache()
def get_directory_store() -> DirectoryStore:
    """
    Create and cache the process-wide DirectoryStore.

    Tests reset it between cases or override this dependency.
    """
    return DirectoryStore()


def get_store() -> DirectoryStore:
    """FastAPI dependency to inject DirectoryStore."""
    return get_directory_store()


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    store: DirectoryStore = Depends(get_store),
) -> Dict[str, Any]:
    """Resolve the bearer token to a registered user or reject with 401."""
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    claims = verify_access_token(authorization.removeprefix("Bearer ").strip())
    if claims is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = store.users.get(claims.get("userId"))
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user
