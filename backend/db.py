from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from backend.settings import get_settings

ASYNC_SCHEMES = {
    "sqlite": "sqlite+aiosqlite",
    "postgres": "postgresql+asyncpg",
    "postgresql": "postgresql+asyncpg",
    "postgresql+psycopg2": "postgresql+asyncpg",
}

# asyncpg takes ``ssl`` instead of libpq's ``sslmode``.
DROPPED_QUERY_KEYS = {"sslmode", "channel_binding"}


def _normalize_database_url(database_url: str) -> str:
    url = str(database_url or "").strip()
    scheme, sep, rest = url.partition("://")
    if not sep:
        return url
    url = f"{ASYNC_SCHEMES.get(scheme, scheme)}://{rest}"
    parsed = urlparse(url)
    query = parse_qsl(parsed.query, keep_blank_values=True)
    if not any(key == "sslmode" for key, _ in query):
        return url
    clean = [(key, value) for key, value in query if key not in DROPPED_QUERY_KEYS and key != "ssl"]
    clean.append(("ssl", "true"))
    return urlunparse(parsed._replace(query=urlencode(clean)))


def using_sqlite(database_url: str) -> bool:
    return str(database_url).strip().lower().startswith("sqlite")


_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker | None = None


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        db_url = _normalize_database_url(get_settings().database_url)
        if using_sqlite(db_url):
            _engine = create_async_engine(db_url, future=True)
        else:
            _engine = create_async_engine(db_url, future=True, pool_pre_ping=True, pool_size=10, max_overflow=5)
    return _engine


def get_sessionmaker() -> async_sessionmaker:
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(get_engine(), expire_on_commit=False)
    return _session_factory


async def dispose_engine() -> None:
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_factory = None
