from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.auth import ensure_scope, require_user
from backend import repositories
from backend.schemas import HabitCreate, HabitRename, HabitResponse

router = APIRouter()


@router.get("/v1/habits")
async def list_habits(user_id: str | None = Query(None), user: dict = Depends(require_user)):
    ensure_scope(user, user_id)
    return {"items": await repositories.list_habits(user["id"])}


@router.post("/v1/habits", response_model=HabitResponse)
async def create_habit(payload: HabitCreate, user: dict = Depends(require_user)):
    ensure_scope(user, payload.user_id)
    try:
        habit = await repositories.create_habit(user["id"], payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return habit


@router.patch("/v1/habits/{habit_id}", response_model=HabitResponse)
async def rename_habit(habit_id: str, payload: HabitRename, user: dict = Depends(require_user)):
    try:
        return await repositories.rename_habit(user["id"], habit_id, payload.name)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.delete("/v1/habits/{habit_id}")
async def delete_habit(habit_id: str, user_id: str | None = Query(None), user: dict = Depends(require_user)):
    ensure_scope(user, user_id)
    try:
        await repositories.delete_habit(user["id"], habit_id)
    except LookupError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"ok": True}
