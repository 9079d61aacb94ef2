"""LDB Reader — the Reader capability backed by ctlstore's local SQLite replica.

Invariants:
    - Opened read-only: the sidecar never writes to the LDB
    - Family/table names validated before they are interpolated into SQL
    - Every SQLAlchemy exception is mapped to ReaderError (core/errors.py)
    - A scan holds one pooled connection, released when its cursor is closed

Design Decisions:
    - Async engine + aiosqlite: lookups never block the event loop, and the
      connection pool makes one LDBReader safe to share across requests
    - Primary keys discovered through column_info and cached per table; the LDB
      schema only grows while the sidecar runs
    - Scans stream (AsyncConnection.stream) instead of fetchall, so the row
      ceiling stops reading early instead of after materializing the table
"""

import logging
import re
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncConnection, AsyncEngine, AsyncResult, create_async_engine,
)

from sidecar.core.domain_types import Row
from sidecar.core.errors import ReaderError
from sidecar.core.reader_protocol import RowCursor
from sidecar.infrastructure.column_info import (
    get_column_info, primary_key_columns, quote_identifier,
)

logger = logging.getLogger(__name__)

LAST_UPDATE_TABLE = "_ldb_last_update"
LEDGER_UPDATE_NAME = "ledger"
TABLE_SEPARATOR = "___"

_NAME_RE = re.compile(r"^[a-z][a-z0-9_]*$")
# fromisoformat only takes 3 or 6 fraction digits before Python 3.11
_FRACTION_RE = re.compile(r"\.(\d+)")


def ldb_table_name(family: str, table: str) -> str:
    for kind, name in (("family", family), ("table", table)):
        if not _NAME_RE.match(name):
            raise ReaderError(f"invalid {kind} name: {name!r}")
    return f"{family}{TABLE_SEPARATOR}{table}"


def ldb_url(path: str, read_only: bool = True) -> str:
    if read_only:
        return f"sqlite+aiosqlite:///file:{path}?mode=ro&uri=true"
    return f"sqlite+aiosqlite:///{path}"


class LDBRowCursor(RowCursor):
    """Streams one prefix scan; owns its connection until closed."""

    def __init__(self, conn: AsyncConnection, result: AsyncResult):
        super().__init__()
        self._conn = conn
        self._rows = result.mappings()
        self._result = result

    async def _next_row(self) -> Row | None:
        try:
            row = await self._rows.fetchone()
        except SQLAlchemyError as e:
            logger.debug(f"LDB scan failed: {e}")
            raise ReaderError(f"scan: {e}") from e
        return dict(row) if row is not None else None

    async def _release(self) -> None:
        try:
            await self._result.close()
        finally:
            await self._conn.close()


class LDBReader:
    """Reads rows and replication lag from an LDB file."""

    def __init__(
        self,
        path: str,
        read_only: bool = True,
        now: Callable[[], datetime] | None = None,
        engine: AsyncEngine | None = None,
    ):
        self.path = path
        self.engine = engine or create_async_engine(ldb_url(path, read_only))
        self._now = now or (lambda: datetime.now(timezone.utc))
        self._pk_cache: dict[str, list[str]] = {}

    async def close(self) -> None:
        await self.engine.dispose()

    # ─── Reader protocol ────────────────────────────────────────

    async def get_row_by_key(
        self, family: str, table: str, *key: Any,
    ) -> Row | None:
        ldb_table = ldb_table_name(family, table)
        try:
            async with self.engine.connect() as conn:
                pk = await self._primary_key(conn, ldb_table)
                if len(key) != len(pk):
                    raise ReaderError(
                        f"key length mismatch: {ldb_table} has {len(pk)} "
                        f"primary key column(s), got {len(key)}",
                    )
                sql, params = _select_by_key(ldb_table, pk, key)
                result = await conn.execute(text(sql), params)
                row = result.mappings().first()
        except SQLAlchemyError as e:
            logger.debug(
                f"LDB lookup failed: {e}",
                extra={"family": family, "table": table},
            )
            raise ReaderError(f"get row by key: {e}") from e
        return dict(row) if row is not None else None

    async def get_rows_by_key_prefix(
        self, family: str, table: str, *key: Any,
    ) -> RowCursor:
        ldb_table = ldb_table_name(family, table)
        try:
            conn = await self.engine.connect()
            try:
                pk = await self._primary_key(conn, ldb_table)
                if len(key) > len(pk):
                    raise ReaderError(
                        f"key prefix too long: {ldb_table} has {len(pk)} "
                        f"primary key column(s), got {len(key)}",
                    )
                sql, params = _select_by_key(ldb_table, pk, key)
                sql += " ORDER BY " + ", ".join(quote_identifier(c) for c in pk)
                result = await conn.stream(text(sql), params)
            except BaseException:
                await conn.close()
                raise
        except SQLAlchemyError as e:
            logger.debug(
                f"LDB scan failed: {e}",
                extra={"family": family, "table": table},
            )
            raise ReaderError(f"get rows by key prefix: {e}") from e
        return LDBRowCursor(conn, result)

    async def get_ledger_latency(self) -> timedelta:
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(
                    text(
                        f"SELECT timestamp FROM {LAST_UPDATE_TABLE} "
                        "WHERE name = :name",
                    ),
                    {"name": LEDGER_UPDATE_NAME},
                )
                value = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.debug(f"LDB ledger latency query failed: {e}")
            raise ReaderError(str(e)) from e
        if value is None:
            raise ReaderError("no ledger updates have been received yet")
        return self._now() - parse_timestamp(value)

    # ─── helpers ────────────────────────────────────────────────

    async def _primary_key(self, conn: AsyncConnection, ldb_table: str) -> list[str]:
        cached = self._pk_cache.get(ldb_table)
        if cached is not None:
            return cached
        infos = await get_column_info(conn, [ldb_table])
        if not infos:
            raise ReaderError(f"table not found: {ldb_table}")
        pk = primary_key_columns(infos)
        if not pk:
            raise ReaderError(f"table has no primary key: {ldb_table}")
        self._pk_cache[ldb_table] = pk
        return pk


def _select_by_key(
    ldb_table: str, pk: list[str], key: tuple[Any, ...],
) -> tuple[str, dict[str, Any]]:
    sql = f"SELECT * FROM {quote_identifier(ldb_table)}"
    params = {f"k{i}": value for i, value in enumerate(key)}
    if key:
        sql += " WHERE " + " AND ".join(
            f"{quote_identifier(col)} = :k{i}" for i, col in enumerate(pk[:len(key)])
        )
    return sql, params


def parse_timestamp(value: Any) -> datetime:
    """LDB timestamps are ISO-ish text or unix seconds; naive means UTC."""
    if isinstance(value, (int, float)):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    if isinstance(value, datetime):
        ts = value
    else:
        try:
            ts = datetime.fromisoformat(_normalize_iso(str(value)))
        except ValueError as e:
            raise ReaderError(f"invalid ledger timestamp: {value!r}") from e
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def _normalize_iso(text: str) -> str:
    """Pad or cut the seconds fraction to microseconds and spell out Z as UTC."""
    text = text.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return _FRACTION_RE.sub(
        lambda m: "." + (m.group(1) + "000000")[:6], text, count=1,
    )
