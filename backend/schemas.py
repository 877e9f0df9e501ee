from __future__ import annotations

from datetime import date as dt_date
from typing import Optional

from pydantic import BaseModel


class SignupPayload(BaseModel):
    email: str
    password: str
    username: str


class LoginPayload(BaseModel):
    email: str
    password: str


class PasswordPayload(BaseModel):
    password: str


class ResetPayload(BaseModel):
    email: str


class UserResponse(BaseModel):
    id: str
    email: str
    username: str
    created_at: Optional[str] = None


class SessionResponse(BaseModel):
    token: str
    user: UserResponse


class HabitCreate(BaseModel):
    name: str
    user_id: Optional[str] = None


class HabitRename(BaseModel):
    name: str


class HabitResponse(BaseModel):
    id: str
    user_id: str
    name: str
    created_at: str


class EntryUpsert(BaseModel):
    habit_id: str
    date: dt_date
    value: bool
    user_id: Optional[str] = None


class EntryResponse(BaseModel):
    user_id: str
    habit_id: str
    date: str
    value: bool
    updated_at: Optional[str] = None
