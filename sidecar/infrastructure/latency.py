"""API Latency — per-operation timing of every handler invocation.

Invariants:
    - Every observation is tagged with the operation name and caller user-agent
    - Recording happens in `finally`: it runs on success and failure alike and
      never changes what the handler returns or raises

Design Decisions:
    - Sink is a plain callable: the default writes a DEBUG log line, tests pass a
      list.append to capture samples
"""

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Callable, Iterator

from fastapi import Request

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LatencySample:
    op: str
    user_agent: str
    duration_s: float


LatencySink = Callable[[LatencySample], None]


def log_sample(sample: LatencySample) -> None:
    logger.debug(
        f"api-latency op={sample.op} duration={sample.duration_s:.6f}s",
        extra={
            "op": sample.op,
            "user_agent": sample.user_agent,
            "duration_ms": round(sample.duration_s * 1000, 3),
        },
    )


class LatencyObserver:
    """Times handler bodies and hands each sample to a sink."""

    def __init__(self, sink: LatencySink | None = None):
        self._sink = sink or log_sample

    @contextmanager
    def observe(self, request: Request, op: str) -> Iterator[None]:
        start = time.perf_counter()
        try:
            yield
        finally:
            self._sink(LatencySample(
                op=op,
                user_agent=request.headers.get("user-agent", ""),
                duration_s=time.perf_counter() - start,
            ))
