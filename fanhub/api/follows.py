from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from fanhub.core.dependencies import get_current_user, get_store
from fanhub.schemas.follows import FollowStatusResponse
from fanhub.services.directory_store import DirectoryStore

router = APIRouter(prefix="/follows", tags=["follows"])


@router.get("")
async def get_followed_celebrities(
    store: DirectoryStore = Depends(get_store),
    user: Dict[str, Any] = Depends(get_current_user),
) -> List[Dict[str, Any]]:
    """Get the celebrities the caller follows."""
    return store.get_followed(user["id"])


@router.get("/status/{celebrity_id}", response_model=FollowStatusResponse, response_model_by_alias=True)
async def get_follow_status(
    celebrity_id: str,
    store: DirectoryStore = Depends(get_store),
    user: Dict[str, Any] = Depends(get_current_user),
):
    """Check whether the caller follows a celebrity."""
    if store.get_celebrity(celebrity_id) is None:
        raise HTTPException(status_code=404, detail="Celebrity not found")
    return FollowStatusResponse(is_following=store.is_following(user["id"], celebrity_id))


@router.post("/{celebrity_id}", status_code=201)
async def follow_celebrity(
    celebrity_id: str,
    store: DirectoryStore = Depends(get_store),
    user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    """Follow a celebrity."""
    try:
        return store.follow(user["id"], celebrity_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="Celebrity not found")


@router.delete("/{celebrity_id}")
async def unfollow_celebrity(
    celebrity_id: str,
    store: DirectoryStore = Depends(get_store),
    user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, str]:
    """Unfollow a celebrity."""
    store.unfollow(user["id"], celebrity_id)
    return {"message": "Successfully unfollowed celebrity"}
