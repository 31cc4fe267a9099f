from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException

from fanhub.core.dependencies import get_current_user, get_store
from fanhub.schemas.celebrities import CreateCelebrityRequest
from fanhub.services.directory_store import DirectoryStore

router = APIRouter(prefix="/celebrities", tags=["celebrities"])


@router.get("")
async def list_celebrities(store: DirectoryStore = Depends(get_store)) -> List[Dict[str, Any]]:
    """List every celebrity."""
    return store.list_celebrities()


@router.get("/{celebrity_id}")
async def get_celebrity(
    celebrity_id: str, store: DirectoryStore = Depends(get_store)
) -> Dict[str, Any]:
    """Get a celebrity by ID."""
    celebrity = store.get_celebrity(celebrity_id)
    if celebrity is None:
        raise HTTPException(status_code=404, detail="Celebrity not found")
    return celebrity


@router.post("", status_code=201)
async def create_celebrity(
    request: CreateCelebrityRequest,
    store: DirectoryStore = Depends(get_store),
    user: Dict[str, Any] = Depends(get_current_user),
) -> Dict[str, Any]:
    """Create a celebrity profile owned by the caller."""
    data = request.model_dump(mode="json", by_alias=True, exclude_none=True)
    return store.create_celebrity(data, created_by=user["id"])
