"""Shared fixtures for syslens tests."""

import io
import socket
import time

import pytest

from syslens.collector import CollectorService
from syslens.sink import ConsoleSink


def wait_for(predicate, timeout: float = 5.0, interval: float = 0.02) -> bool:
    """Poll predicate until it is true or the timeout expires."""
    deadline = time.time() + timeout
    while time.time() < deadline:
        if predicate():
            return True
        time.sleep(interval)
    return predicate()


def send_raw(address: tuple[str, int], payload: bytes) -> None:
    """Open a connection, write payload, and close."""
    with socket.create_connection(address, timeout=5.0) as sock:
        sock.sendall(payload)


@pytest.fixture
def output() -> io.StringIO:
    """Text buffer standing in for the collector console."""
    return io.StringIO()


@pytest.fixture
def collector(output):
    """Running collector on an ephemeral loopback port, printing to `output`."""
    service = CollectorService(
        ConsoleSink(output),
        host="127.0.0.1",
        port=0,
        backlog=64,
        accept_timeout=0.1,
    )
    service.start()
    try:
        yield service
    finally:
        service.stop()
