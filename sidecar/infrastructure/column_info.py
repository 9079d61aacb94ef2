"""Schema Introspection — column metadata for LDB tables.

Invariants:
    - Columns ordered by table name, then ordinal position (1-based)
    - Unknown tables contribute no columns (callers decide whether that is an error)
    - Empty input short-circuits without touching the database

Design Decisions:
    - PRAGMA table_info over sqlite_master parsing: SQLite reports the declared
      type and the position inside the primary key directly
"""

from dataclasses import dataclass
from typing import Sequence

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection


@dataclass(frozen=True)
class DBColumnInfo:
    table_name: str
    index: int
    column_name: str
    data_type: str
    is_primary_key: bool
    pk_position: int = 0


def quote_identifier(name: str) -> str:
    return '"' + name.replace('"', '""') + '"'


async def get_column_info(
    conn: AsyncConnection, table_names: Sequence[str],
) -> list[DBColumnInfo]:
    if not table_names:
        return []

    infos: list[DBColumnInfo] = []
    for table_name in sorted(table_names):
        result = await conn.execute(
            text(f"PRAGMA table_info({quote_identifier(table_name)})"),
        )
        for cid, name, data_type, _notnull, _default, pk in result.all():
            infos.append(DBColumnInfo(
                table_name=table_name,
                index=cid + 1,
                column_name=name,
                data_type=data_type,
                is_primary_key=pk > 0,
                pk_position=pk,
            ))
    infos.sort(key=lambda c: (c.table_name, c.index))
    return infos


def primary_key_columns(infos: Sequence[DBColumnInfo]) -> list[str]:
    """Primary key column names in key order."""
    pk = [c for c in infos if c.is_primary_key]
    pk.sort(key=lambda c: c.pk_position)
    return [c.column_name for c in pk]
