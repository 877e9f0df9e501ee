from __future__ import annotations

from sqlalchemy import text as sql_text

from backend.db import get_engine


USERS_TABLE = "users"
HABITS_TABLE = "habits"
ENTRIES_TABLE = "habit_entries"


async def init_db():
    engine = get_engine()
    async with engine.begin() as conn:
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {USERS_TABLE} (
                    id TEXT PRIMARY KEY,
                    email TEXT NOT NULL UNIQUE,
                    username TEXT NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {HABITS_TABLE} (
                    id TEXT PRIMARY KEY,
                    user_id TEXT NOT NULL,
                    name TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
                """
            )
        )
        await conn.execute(
            sql_text(
                f"""
                CREATE TABLE IF NOT EXISTS {ENTRIES_TABLE} (
                    user_id TEXT NOT NULL,
                    habit_id TEXT NOT NULL,
                    date TEXT NOT NULL,
                    value INTEGER NOT NULL DEFAULT 0,
                    updated_at TEXT,
                    PRIMARY KEY (user_id, habit_id, date)
                )
                """
            )
        )

    async def ensure_index(index_sql: str) -> None:
        async with engine.begin() as conn:
            await conn.execute(sql_text(index_sql))

    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{HABITS_TABLE}_user_created "
        f"ON {HABITS_TABLE} (user_id, created_at)"
    )
    await ensure_index(
        f"CREATE INDEX IF NOT EXISTS idx_{ENTRIES_TABLE}_user_date "
        f"ON {ENTRIES_TABLE} (user_id, date)"
    )
