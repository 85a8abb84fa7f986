import logging

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import IntegrityError

from backend.auth import ensure_owner, require_user
from backend import repositories

logger = logging.getLogger(__name__)


def build_crud_router(table: str, path: str, create_model, patch_model, label: str) -> APIRouter:
    """CRUD routes for one per-user table under ``/v1/{path}``."""
    router = APIRouter()
    collection = f"/v1/{path}"
    item = f"/v1/{path}/{{row_id}}"

    @router.get(collection)
    async def list_items(user_id: str = Depends(require_user)):
        items = await repositories.list_rows(user_id, table)
        return {"items": jsonable_encoder(items)}

    @router.post(collection, status_code=201)
    async def create_item(payload: create_model = Body(...), user_id: str = Depends(require_user)):
        ensure_owner(payload.user_id, user_id)
        clean = payload.model_dump(mode="json", exclude={"user_id"})
        try:
            record = await repositories.create_row(user_id, table, clean)
        except Exception as exc:
            logger.exception("Failed to create %s: %s", label, exc)
            raise HTTPException(status_code=500, detail="Internal error")
        logger.info("Created %s %s for %s", label, record.get("id"), user_id)
        return jsonable_encoder(record)

    @router.get(item)
    async def get_item(row_id: str, user_id: str = Depends(require_user)):
        record = await repositories.get_row(user_id, table, row_id)
        if record is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return jsonable_encoder(record)

    @router.patch(item)
    async def patch_item(row_id: str, payload: patch_model = Body(...), user_id: str = Depends(require_user)):
        ensure_owner(payload.user_id, user_id)
        patch = payload.model_dump(mode="json", exclude_unset=True, exclude={"user_id"})
        try:
            record = await repositories.update_row(user_id, table, row_id, patch)
        except IntegrityError:
            raise HTTPException(status_code=409, detail=f"{label} conflicts with an existing row")
        except Exception as exc:
            logger.exception("Failed to update %s: %s", label, exc)
            raise HTTPException(status_code=500, detail="Internal error")
        if record is None:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return jsonable_encoder(record)

    @router.delete(item)
    async def delete_item(row_id: str, user_id: str = Depends(require_user)):
        try:
            deleted = await repositories.delete_row(user_id, table, row_id)
        except Exception as exc:
            logger.exception("Failed to delete %s: %s", label, exc)
            raise HTTPException(status_code=500, detail="Internal error")
        if not deleted:
            raise HTTPException(status_code=404, detail=f"{label} not found")
        return {"ok": True}

    return router
