from __future__ import annotations

from fastapi import Header, HTTPException

from backend import repositories
from backend.security import read_token


async def require_user(authorization: str | None = Header(default=None, alias="Authorization")) -> dict:
    if not authorization or not authorization.lower().startswith("bearer "):
        raise HTTPException(status_code=401, detail="Missing bearer token")
    user_id = read_token(authorization[len("bearer ") :].strip())
    if not user_id:
        raise HTTPException(status_code=401, detail="Invalid or expired token")
    user = await repositories.get_user(user_id)
    if not user:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


def ensure_scope(user: dict, user_id: str | None) -> None:
    if user_id and user_id != user["id"]:
        raise HTTPException(status_code=403, detail="User mismatch")
