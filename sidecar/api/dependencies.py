"""Route Dependencies — shared, read-only per-app state handed to every handler.

Invariants:
    - SidecarState is immutable after create_app(); handlers never mutate it
    - Request body reads and Reader work are bounded by the configured deadlines
    - Reader failures of any type reach the error translator as SidecarError
"""

import asyncio
from dataclasses import dataclass
from typing import Awaitable, TypeVar

from fastapi import Request

from sidecar.config import SidecarConfig
from sidecar.core.domain_types import KeySegment
from sidecar.core.errors import ErrorCategory, ReaderError, SidecarError
from sidecar.core.reader_protocol import Reader
from sidecar.infrastructure.latency import LatencyObserver
from sidecar.schemas.read_request import decode_read_request

T = TypeVar("T")


@dataclass(frozen=True)
class SidecarState:
    config: SidecarConfig
    observer: LatencyObserver

    @property
    def reader(self) -> Reader:
        return self.config.reader

    @property
    def max_rows(self) -> int:
        return self.config.max_rows


def get_state(request: Request) -> SidecarState:
    """FastAPI dependency for the app's SidecarState."""
    return request.app.state.sidecar


async def within_deadline(aw: Awaitable[T], seconds: float, what: str) -> T:
    """Await `aw`, cancelling it once `seconds` have passed."""
    try:
        return await asyncio.wait_for(aw, timeout=seconds)
    except asyncio.TimeoutError as e:
        raise SidecarError(
            f"{what}: deadline of {seconds:g}s exceeded",
            "DEADLINE_EXCEEDED", ErrorCategory.TIMEOUT,
        ) from e


async def call_reader(
    aw: Awaitable[T], seconds: float, what: str, context: str | None = None,
) -> T:
    """Run Reader work under the write deadline.

    Whatever the Reader raises leaves as a SidecarError: foreign exceptions
    become ReaderError, and `context` prefixes every ReaderError.
    """
    try:
        return await within_deadline(aw, seconds, what)
    except ReaderError as e:
        raise (e.with_context(context) if context else e) from e
    except SidecarError:
        raise
    except Exception as e:
        err = ReaderError(str(e) or type(e).__name__)
        raise (err.with_context(context) if context else err) from e


async def read_key_segments(
    request: Request, state: SidecarState,
) -> list[KeySegment]:
    body = await within_deadline(
        request.body(), state.config.read_timeout_seconds, "read body",
    )
    return decode_read_request(body)
