"""Error Handlers — the single place a failed request becomes an HTTP response.

Invariants:
    - Every failure is logged exactly once, with the request URL, before translation
    - Response is 500 with the error text as a text/plain body
    - Row-not-found never reaches this module (routes answer 404 themselves)

Design Decisions:
    - One finalize_error() shared by the domain and catch-all handlers, so the
      failure format is defined (and tested) once
    - Plain-text body over a JSON envelope: callers match on the message text
      ("healthcheck: replica unreachable"), not on an error code
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import PlainTextResponse

from sidecar.core.errors import SidecarError

logger = logging.getLogger(__name__)


def finalize_error(request: Request, exc: Exception) -> PlainTextResponse:
    """Log the failure and build the response for it."""
    code = exc.code if isinstance(exc, SidecarError) else "INTERNAL_ERROR"
    logger.error(
        f"err={exc} url={request.url}",
        extra={"url": str(request.url), "error_code": code},
        exc_info=not isinstance(exc, SidecarError),
    )
    return PlainTextResponse(
        f"{exc}\n", status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(SidecarError)
    async def sidecar_error_handler(request: Request, exc: SidecarError):
        return finalize_error(request, exc)

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all for failures that escaped the typed hierarchy."""
        return finalize_error(request, exc)
