"""Boundary Protocols — the Reader capability the sidecar is built around.

Invariants:
    - Routes only ever talk to the store through Reader
    - A RowCursor is released exactly once, however iteration ends
    - Reader implementations must be safe for concurrent use; the sidecar shares
      one instance across all in-flight requests and never locks around it

Design Decisions:
    - Reader as Protocol: structural subtyping, the LDB adapter and the test fake
      share no inheritance
    - RowCursor as a base class instead: the release-once bookkeeping is real
      behaviour, and every cursor needs the same async-context-manager shape
    - Not-found is `None`, not an exception: it is an expected lookup outcome
"""

from datetime import timedelta
from typing import Any, AsyncIterator, Protocol

from sidecar.core.domain_types import Row


class RowCursor:
    """Forward-only, closeable async stream of rows from a prefix scan.

    Subclasses implement _next_row() (return None when exhausted) and _release().
    """

    def __init__(self):
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def _next_row(self) -> Row | None:
        raise NotImplementedError

    async def _release(self) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._release()

    def __aiter__(self) -> AsyncIterator[Row]:
        return self

    async def __anext__(self) -> Row:
        if self._closed:
            raise StopAsyncIteration
        row = await self._next_row()
        if row is None:
            raise StopAsyncIteration
        return row

    async def __aenter__(self) -> "RowCursor":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


class Reader(Protocol):
    """Read-only access to one ctlstore replica."""

    async def get_row_by_key(
        self, family: str, table: str, *key: Any,
    ) -> Row | None: ...

    async def get_rows_by_key_prefix(
        self, family: str, table: str, *key: Any,
    ) -> RowCursor: ...

    async def get_ledger_latency(self) -> timedelta: ...
