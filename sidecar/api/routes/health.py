"""Health Routes — healthcheck and ping, both driven by the ledger latency query.

Invariants:
    - 200 with an empty body when the Reader answers the latency query
    - 500 with "healthcheck: <cause>" otherwise; the latency value itself is ignored
    - /ping answers exactly like /healthcheck

Design Decisions:
    - /ping calls the healthcheck handler instead of being a route alias, so the
      two can diverge later without clients changing URLs
"""

from fastapi import APIRouter, Depends, Request, Response, status

from sidecar.api.dependencies import SidecarState, call_reader, get_state

router = APIRouter(tags=["health"])


@router.get("/healthcheck")
async def healthcheck(
    request: Request, state: SidecarState = Depends(get_state),
):
    """Liveness of the replica: can the Reader report its lag?"""
    with state.observer.observe(request, "healthcheck"):
        await call_reader(
            state.reader.get_ledger_latency(),
            state.config.write_timeout_seconds, "healthcheck",
            context="healthcheck",
        )
        return Response(status_code=status.HTTP_200_OK)


@router.get("/ping")
async def ping(
    request: Request, state: SidecarState = Depends(get_state),
):
    with state.observer.observe(request, "ping"):
        # for now, just hit the healthcheck
        return await healthcheck(request, state)
