from fastapi import APIRouter, Depends, HTTPException

from fanhub.core.dependencies import get_store
from fanhub.core.security import create_access_token
from fanhub.schemas.auth import SigninRequest, SignupRequest
from fanhub.services.directory_store import DirectoryStore

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=201)
async def sign_up(credentials: SignupRequest, store: DirectoryStore = Depends(get_store)):
    """Register a user and return an access token."""
    try:
        user = store.create_user(credentials.username, credentials.password)
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"accessToken": create_access_token(user["id"], user["username"])}


@router.post("/signin")
async def sign_in(credentials: SigninRequest, store: DirectoryStore = Depends(get_store)):
    """Authenticate a user and return an access token."""
    user = store.authenticate(credentials.username, credentials.password)
    if user is None:
        raise HTTPException(status_code=401, detail="Invalid username or password")
    return {"accessToken": create_access_token(user["id"], user["username"])}
