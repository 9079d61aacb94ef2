"""Row Encoding — JSON-safe rendering of rows read from the store.

Invariants:
    - bytes values (BLOB / varbinary columns) become standard base64 strings,
      the same encoding binary key segments arrive in
    - Column order and row order are preserved
"""

import base64
from typing import Any, Iterable

from sidecar.core.domain_types import Row


def encode_value(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(value)).decode("ascii")
    return value


def encode_row(row: Row) -> dict[str, Any]:
    return {column: encode_value(value) for column, value in row.items()}


def encode_rows(rows: Iterable[Row]) -> list[dict[str, Any]]:
    return [encode_row(row) for row in rows]
