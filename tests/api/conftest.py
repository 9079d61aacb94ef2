"""Route test fixtures — FastAPI app over the in-memory Reader.

Invariants:
    - Every test gets a fresh MemoryReader and a fresh app
    - Latency samples are captured in a list instead of logged
    - `max_rows` and `write_timeout` can be overridden with parametrize

Design Decisions:
    - httpx ASGITransport: no sockets, no lifespan, the app is called directly
"""

import pytest
from httpx import ASGITransport, AsyncClient

from sidecar.config import SidecarConfig
from sidecar.infrastructure.latency import LatencyObserver
from sidecar.main import create_app

from tests.fake_reader import MemoryReader


@pytest.fixture
def reader():
    return MemoryReader()


@pytest.fixture
def samples():
    return []


@pytest.fixture
def max_rows():
    return 0


@pytest.fixture
def write_timeout():
    return 5.0


@pytest.fixture
def app(reader, samples, max_rows, write_timeout):
    config = SidecarConfig(
        bind_addr="localhost:0",
        reader=reader,
        max_rows=max_rows,
        write_timeout_seconds=write_timeout,
    )
    return create_app(config, observer=LatencyObserver(samples.append))


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
