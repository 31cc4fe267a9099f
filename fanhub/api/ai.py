from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import ValidationError

from fanhub.core.dependencies import get_store
from fanhub.schemas.celebrities import CelebrityDraft
from fanhub.services.directory_store import DirectoryStore

router = APIRouter(prefix="/ai", tags=["ai"])


@router.get("/suggest-celebrities")
async def suggest_celebrities(
    q: str = Query(default=""), store: DirectoryStore = Depends(get_store)
) -> List[str]:
    """Suggest celebrity names for a partial query."""
    return store.suggest_names(q)


@router.get("/autofill-celebrity/{name}")
async def autofill_celebrity(name: str, store: DirectoryStore = Depends(get_store)) -> Dict[str, Any]:
    """Profile data for a known celebrity, shaped for the create form."""
    celebrity = store.find_celebrity_by_name(name)
    if celebrity is None:
        raise HTTPException(status_code=404, detail=f"No data found for {name}")
    try:
        draft = CelebrityDraft.model_validate(celebrity)
    except ValidationError:
        raise HTTPException(status_code=404, detail=f"Incomplete data for {name}")
    return draft.model_dump(mode="json", by_alias=True)
