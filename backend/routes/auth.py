from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from backend.auth import require_user
from backend import repositories
from backend.schemas import LoginPayload, PasswordPayload, ResetPayload, SessionResponse, SignupPayload, UserResponse
from backend.security import hash_password, issue_token, verify_password
from backend.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter()


def _check_password_length(password: str) -> None:
    minimum = get_settings().password_min_length
    if not password or len(password) < minimum:
        raise HTTPException(status_code=400, detail=f"Password must be at least {minimum} characters")


@router.post("/v1/auth/signup", response_model=SessionResponse)
async def signup(payload: SignupPayload):
    if not payload.username.strip():
        raise HTTPException(status_code=400, detail="Username is required")
    _check_password_length(payload.password)
    try:
        user = await repositories.create_user(payload.email, payload.username, hash_password(payload.password))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"token": issue_token(user["id"]), "user": user}


@router.post("/v1/auth/login", response_model=SessionResponse)
async def login(payload: LoginPayload):
    record = await repositories.get_user_by_email(payload.email)
    if not record or not verify_password(payload.password, record["password_hash"]):
        raise HTTPException(status_code=400, detail="Invalid login credentials")
    record.pop("password_hash", None)
    return {"token": issue_token(record["id"]), "user": record}


@router.get("/v1/auth/user", response_model=UserResponse)
async def current_user(user: dict = Depends(require_user)):
    return user


@router.post("/v1/auth/logout")
async def logout(user: dict = Depends(require_user)):
    logger.info("User %s signed out", user["id"])
    return {"ok": True}


@router.put("/v1/auth/password")
async def update_password(payload: PasswordPayload, user: dict = Depends(require_user)):
    _check_password_length(payload.password)
    await repositories.update_password_hash(user["id"], hash_password(payload.password))
    return {"ok": True}


@router.post("/v1/auth/reset")
async def reset_password(payload: ResetPayload):
    email = payload.email.strip().lower()
    if not email:
        raise HTTPException(status_code=400, detail="Email is required")
    record = await repositories.get_user_by_email(email)
    if record:
        logger.info("Password reset requested for user %s", record["id"])
    else:
        logger.info("Password reset requested for unknown email")
    return {"ok": True}
