from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import require_user
from backend import repositories

router = APIRouter()


@router.get("/v1/changes")
async def get_changes(table: str = Query(...), user_id: str = Depends(require_user)):
    """Current revision of ``table`` for the caller; it moves on every write."""
    if table not in repositories.TABLE_COLUMNS:
        raise HTTPException(status_code=400, detail=f"Unknown table: {table}")
    revision = await repositories.get_revision(user_id, table)
    return {"table": table, "revision": revision}
