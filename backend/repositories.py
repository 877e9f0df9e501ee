from __future__ import annotations

from datetime import date, datetime, timezone
from uuid import uuid4

from sqlalchemy import text as sql_text

from backend.db import get_sessionmaker
from backend.settings import get_settings

USERS_TABLE = "users"
HABITS_TABLE = "habits"
ENTRIES_TABLE = "habit_entries"


def _new_id() -> str:
    return uuid4().hex


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _day_iso(value) -> str:
    if isinstance(value, date):
        return value.isoformat()
    return str(value)[:10]


def _normalize_entry_row(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload["date"] = _day_iso(payload.get("date"))
    payload["value"] = bool(payload.get("value"))
    return payload


def _public_user(row) -> dict:
    if not row:
        return {}
    payload = dict(row)
    payload.pop("password_hash", None)
    return payload


def clean_habit_name(raw_value) -> str:
    name = " ".join(str(raw_value or "").split()).strip()
    if not name:
        raise ValueError("Habit name cannot be empty")
    return name[: get_settings().habit_name_max_length]


async def get_user(user_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(f"SELECT id, email, username, created_at FROM {USERS_TABLE} WHERE id = :id"),
            {"id": user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def get_user_by_email(email: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT id, email, username, password_hash, created_at FROM {USERS_TABLE} WHERE email = :email"
            ),
            {"email": email.strip().lower()},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_user(email: str, username: str, password_hash: str) -> dict:
    clean_email = str(email or "").strip().lower()
    if not clean_email:
        raise ValueError("Email is required")
    if await get_user_by_email(clean_email):
        raise ValueError("User already registered")
    record = {
        "id": _new_id(),
        "email": clean_email,
        "username": str(username or "").strip(),
        "password_hash": password_hash,
        "created_at": _now(),
        "updated_at": _now(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {USERS_TABLE} (id, email, username, password_hash, created_at, updated_at)
                VALUES (:id, :email, :username, :password_hash, :created_at, :updated_at)
                """
            ),
            record,
        )
        await session.commit()
    return _public_user(record)


async def update_password_hash(user_id: str, password_hash: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"UPDATE {USERS_TABLE} SET password_hash = :password_hash, updated_at = :updated_at WHERE id = :id"
            ),
            {"id": user_id, "password_hash": password_hash, "updated_at": _now()},
        )
        await session.commit()


async def list_habits(user_id: str) -> list[dict]:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT id, user_id, name, created_at
                FROM {HABITS_TABLE}
                WHERE user_id = :user_id
                ORDER BY created_at ASC
                """
            ),
            {"user_id": user_id},
        )).mappings().all()
    return [dict(row) for row in rows]


async def get_habit(user_id: str, habit_id: str) -> dict | None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"SELECT id, user_id, name, created_at FROM {HABITS_TABLE} WHERE id = :id AND user_id = :user_id"
            ),
            {"id": habit_id, "user_id": user_id},
        )).mappings().fetchone()
    return dict(row) if row else None


async def create_habit(user_id: str, name: str) -> dict:
    record = {
        "id": _new_id(),
        "user_id": user_id,
        "name": clean_habit_name(name),
        "created_at": _now(),
    }
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {HABITS_TABLE} (id, user_id, name, created_at)
                VALUES (:id, :user_id, :name, :created_at)
                """
            ),
            record,
        )
        await session.commit()
    return record


async def rename_habit(user_id: str, habit_id: str, name: str) -> dict:
    clean_name = clean_habit_name(name)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        result = await session.execute(
            sql_text(f"UPDATE {HABITS_TABLE} SET name = :name WHERE id = :id AND user_id = :user_id"),
            {"id": habit_id, "user_id": user_id, "name": clean_name},
        )
        await session.commit()
    if not result.rowcount:
        raise LookupError("Habit not found")
    return await get_habit(user_id, habit_id)


async def delete_habit(user_id: str, habit_id: str) -> None:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(f"DELETE FROM {ENTRIES_TABLE} WHERE user_id = :user_id AND habit_id = :habit_id"),
            {"user_id": user_id, "habit_id": habit_id},
        )
        result = await session.execute(
            sql_text(f"DELETE FROM {HABITS_TABLE} WHERE user_id = :user_id AND id = :habit_id"),
            {"user_id": user_id, "habit_id": habit_id},
        )
        if not result.rowcount:
            await session.rollback()
            raise LookupError("Habit not found")
        await session.commit()


async def list_entries(user_id: str, start_iso: str | None = None, end_iso: str | None = None) -> list[dict]:
    clauses = ["user_id = :user_id"]
    params = {"user_id": user_id}
    if start_iso:
        clauses.append("date >= :start_date")
        params["start_date"] = start_iso
    if end_iso:
        clauses.append("date <= :end_date")
        params["end_date"] = end_iso
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        rows = (await session.execute(
            sql_text(
                f"""
                SELECT user_id, habit_id, date, value, updated_at
                FROM {ENTRIES_TABLE}
                WHERE {' AND '.join(clauses)}
                ORDER BY date, habit_id
                """
            ),
            params,
        )).mappings().all()
    return [_normalize_entry_row(row) for row in rows]


async def get_entry(user_id: str, habit_id: str, day_iso: str) -> dict:
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        row = (await session.execute(
            sql_text(
                f"""
                SELECT user_id, habit_id, date, value, updated_at
                FROM {ENTRIES_TABLE}
                WHERE user_id = :user_id AND habit_id = :habit_id AND date = :date
                """
            ),
            {"user_id": user_id, "habit_id": habit_id, "date": day_iso},
        )).mappings().fetchone()
    return _normalize_entry_row(row)


async def upsert_entry(user_id: str, habit_id: str, day, value: bool) -> dict:
    if not await get_habit(user_id, habit_id):
        raise LookupError("Habit not found")
    day_iso = _day_iso(day)
    session_factory = get_sessionmaker()
    async with session_factory() as session:
        await session.execute(
            sql_text(
                f"""
                INSERT INTO {ENTRIES_TABLE} (user_id, habit_id, date, value, updated_at)
                VALUES (:user_id, :habit_id, :date, :value, :updated_at)
                ON CONFLICT(user_id, habit_id, date) DO UPDATE SET
                    value = EXCLUDED.value,
                    updated_at = EXCLUDED.updated_at
                """
            ),
            {
                "user_id": user_id,
                "habit_id": habit_id,
                "date": day_iso,
                "value": int(bool(value)),
                "updated_at": _now(),
            },
        )
        await session.commit()
    return await get_entry(user_id, habit_id, day_iso)
