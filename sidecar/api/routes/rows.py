"""Row Routes — point lookups and prefix scans against the store.

Invariants:
    - Malformed bodies fail before the Reader is touched
    - Lookup miss → 404 + X-Ctlstore header + empty body (never an error)
    - Scan cursors are closed on every exit path (success, scan error, limit)
    - Scan responses are built only after the full row list is known, so a
      failed scan never leaks partial rows

Design Decisions:
    - Row ceiling checked after each append: the (max_rows + 1)-th row is read
      before the scan is rejected, matching what existing clients observe
"""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse

from sidecar.api.dependencies import (
    SidecarState, call_reader, get_state, read_key_segments,
)
from sidecar.core.domain_types import Row
from sidecar.core.errors import RowLimitExceededError
from sidecar.core.key_codec import to_positional_args
from sidecar.core.reader_protocol import Reader
from sidecar.core.row_encoding import encode_row, encode_rows

router = APIRouter(tags=["rows"])

NOT_FOUND_HEADER = "X-Ctlstore"
NOT_FOUND_VALUE = "Not Found"


@router.post("/get-row-by-key/{family}/{table}")
async def get_row_by_key(
    family: str, table: str, request: Request,
    state: SidecarState = Depends(get_state),
):
    """Fetch the single row whose full primary key matches."""
    with state.observer.observe(request, "get-row-by-key"):
        keys = to_positional_args(await read_key_segments(request, state))
        row = await call_reader(
            state.reader.get_row_by_key(family, table, *keys),
            state.config.write_timeout_seconds, "get row by key",
        )
        if row is None:
            # header separates "no such row" from "no such route"
            return Response(
                status_code=status.HTTP_404_NOT_FOUND,
                headers={NOT_FOUND_HEADER: NOT_FOUND_VALUE},
            )
        return JSONResponse(encode_row(row))


@router.post("/get-rows-by-key-prefix/{family}/{table}")
async def get_rows_by_key_prefix(
    family: str, table: str, request: Request,
    state: SidecarState = Depends(get_state),
):
    """Fetch every row whose primary key starts with the given segments."""
    with state.observer.observe(request, "get-rows-by-key-prefix"):
        keys = to_positional_args(await read_key_segments(request, state))
        rows = await call_reader(
            collect_rows(state.reader, state.max_rows, family, table, keys),
            state.config.write_timeout_seconds, "get rows by key prefix",
        )
        return JSONResponse(encode_rows(rows))


async def collect_rows(
    reader: Reader, max_rows: int, family: str, table: str, keys: list,
) -> list[Row]:
    """Drain a prefix scan into a list, enforcing the row ceiling."""
    res: list[Row] = []
    async with await reader.get_rows_by_key_prefix(family, table, *keys) as rows:
        async for row in rows:
            res.append(dict(row))
            if max_rows > 0 and len(res) > max_rows:
                raise RowLimitExceededError(max_rows)
    return res
