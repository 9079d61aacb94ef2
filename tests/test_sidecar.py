"""Sidecar server — socket binding and startup failures."""

import socket

import pytest

from sidecar.__main__ import main
from sidecar.config import SidecarConfig
from sidecar.core.errors import StartupError
from sidecar.main import Sidecar

from tests.fake_reader import MemoryReader


def _sidecar(bind_addr):
    return Sidecar(SidecarConfig(bind_addr=bind_addr, reader=MemoryReader()))


def test_bind_free_port():
    sock = _sidecar("127.0.0.1:0").bind()
    try:
        assert sock.getsockname()[0] == "127.0.0.1"
    finally:
        sock.close()


def test_bind_port_in_use_raises_startup_error():
    taken = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    taken.bind(("127.0.0.1", 0))
    taken.listen()
    port = taken.getsockname()[1]
    try:
        with pytest.raises(StartupError, match="listen and serve"):
            _sidecar(f"127.0.0.1:{port}").bind()
    finally:
        taken.close()


def test_bad_bind_addr_raises_startup_error():
    with pytest.raises(StartupError, match="invalid bind address"):
        _sidecar("no-port-here").bind()


async def test_start_propagates_startup_error():
    with pytest.raises(StartupError):
        await _sidecar("no-port-here").start()


def test_cli_rejects_negative_max_rows():
    with pytest.raises(SystemExit):
        main(["--max-rows", "-1"])
