"""LDB fixtures — a temporary SQLite LDB seeded through SQLAlchemy.

Invariants:
    - Every test gets a fresh LDB file under tmp_path
    - The reader opens it read-only, exactly as in production
    - The reader's clock is pinned 1.5 s after the last ledger update
"""

from datetime import datetime, timezone

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from sidecar.infrastructure.ldb_reader import LDBReader

LAST_UPDATE = "2026-10-17 12:00:00"
NOW = datetime(2026, 10, 17, 12, 0, 1, 500000, tzinfo=timezone.utc)

SCHEMA = [
    # key order (team, id) differs from column order on purpose
    'CREATE TABLE "acme___members" ('
    " id INTEGER NOT NULL, team TEXT NOT NULL, name TEXT, avatar BLOB,"
    " PRIMARY KEY (team, id))",
    'CREATE TABLE "acme___flags" (flag BLOB PRIMARY KEY, enabled INTEGER)',
    'CREATE TABLE "acme___nopk" (a TEXT)',
    "CREATE TABLE _ldb_last_update (name TEXT PRIMARY KEY, timestamp DATETIME)",
]

SEED = [
    "INSERT INTO acme___members VALUES (2, 'red', 'Bob', X'0102')",
    "INSERT INTO acme___members VALUES (1, 'red', 'Alice', NULL)",
    "INSERT INTO acme___members VALUES (3, 'blue', 'Carol', NULL)",
    "INSERT INTO acme___flags VALUES (X'00FF', 1)",
    f"INSERT INTO _ldb_last_update VALUES ('ledger', '{LAST_UPDATE}')",
]


async def _build(path, statements):
    engine = create_async_engine(f"sqlite+aiosqlite:///{path}")
    async with engine.begin() as conn:
        for stmt in statements:
            await conn.execute(text(stmt))
    await engine.dispose()


@pytest.fixture
async def ldb_path(tmp_path):
    path = tmp_path / "ldb.db"
    await _build(path, SCHEMA + SEED)
    return str(path)


@pytest.fixture
async def empty_ldb_path(tmp_path):
    path = tmp_path / "empty.db"
    await _build(path, SCHEMA)
    return str(path)


@pytest.fixture
async def ldb_reader(ldb_path):
    reader = LDBReader(ldb_path, now=lambda: NOW)
    yield reader
    await reader.close()
