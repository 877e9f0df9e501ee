from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, Query, HTTPException

from backend.auth import ensure_scope, require_user
from backend import repositories
from backend.schemas import EntryResponse, EntryUpsert

router = APIRouter()


@router.get("/v1/entries")
async def list_entries(
    start: date | None = Query(None),
    end: date | None = Query(None),
    user_id: str | None = Query(None),
    user: dict = Depends(require_user),
):
    ensure_scope(user, user_id)
    if start and end and end < start:
        raise HTTPException(status_code=400, detail="End date must be after start date")
    items = await repositories.list_entries(
        user["id"],
        start.isoformat() if start else None,
        end.isoformat() if end else None,
    )
    return {"items": items}


@router.put("/v1/entries", response_model=EntryResponse)
async def upsert_entry(payload: EntryUpsert, user: dict = Depends(require_user)):
    ensure_scope(user, payload.user_id)
    try:
        return await repositories.upsert_entry(user["id"], payload.habit_id, payload.date, payload.value)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
