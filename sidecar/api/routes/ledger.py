"""Ledger Latency Route — how far the local replica lags the ledger."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from sidecar.api.dependencies import SidecarState, call_reader, get_state

router = APIRouter(tags=["ledger"])


@router.get("/get-ledger-latency")
async def get_ledger_latency(
    request: Request, state: SidecarState = Depends(get_state),
):
    with state.observer.observe(request, "get-ledger-latency"):
        latency = await call_reader(
            state.reader.get_ledger_latency(),
            state.config.write_timeout_seconds, "get ledger latency",
            context="get ledger latency",
        )
        return JSONResponse({
            "value": latency.total_seconds(),
            "unit": "seconds",
        })
