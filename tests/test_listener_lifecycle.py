"""Tests for the capture listener lifecycle on a real loopback socket."""

from __future__ import annotations

import asyncio
import socket
from typing import TYPE_CHECKING

import httpx
import pytest

from notecatch.config import parse_port
from notecatch.listener import CaptureListener, ListenerState

if TYPE_CHECKING:
    from collections.abc import Callable


def _echo(text: str) -> str:
    return text


@pytest.mark.asyncio
async def test_start_serves_on_loopback(port: int) -> None:
    """Test a started listener answers probe and capture requests."""
    captured: list[str] = []

    def on_capture(text: str) -> str:
        captured.append(text)
        return "ok"

    listener = CaptureListener()
    assert await listener.start(port, on_capture)
    try:
        assert listener.state is ListenerState.RUNNING
        assert listener.port == port
        assert listener.url == f"http://localhost:{port}"
        async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{port}") as client:
            probe = await client.get("/")
            posted = await client.post("/buy+milk")
        assert probe.text == "Success"
        assert posted.text == "Success"
        assert captured == ["buy milk"]
    finally:
        await listener.stop()

    assert listener.state is ListenerState.STOPPED
    assert listener.port is None


@pytest.mark.asyncio
async def test_start_twice_is_rejected(port: int) -> None:
    """Test a second start while running does not bind again."""
    listener = CaptureListener()
    assert await listener.start(port, _echo)
    try:
        assert await listener.start(port, _echo) is False
        assert listener.state is ListenerState.RUNNING
        assert listener.port == port
    finally:
        await listener.stop()


@pytest.mark.asyncio
async def test_port_in_use_leaves_listener_stopped(port: int) -> None:
    """Test a second listener on a busy port fails without raising."""
    first = CaptureListener()
    second = CaptureListener()
    assert await first.start(port, _echo)
    try:
        assert await second.start(port, _echo) is False
        assert second.state is ListenerState.STOPPED
    finally:
        await first.stop()


@pytest.mark.asyncio
async def test_stop_releases_port(port: int) -> None:
    """Test the port can be bound again after stop."""
    listener = CaptureListener()
    assert await listener.start(port, _echo)
    await listener.stop()

    other = CaptureListener()
    assert await other.start(port, _echo)
    await other.stop()


@pytest.mark.asyncio
async def test_stop_when_stopped_is_noop() -> None:
    """Test stop without a running server does nothing."""
    listener = CaptureListener()

    await listener.stop()
    await listener.stop()

    assert listener.state is ListenerState.STOPPED


@pytest.mark.asyncio
async def test_invalid_port_is_bind_failure() -> None:
    """Test an out-of-range port is reported as a failed start."""
    listener = CaptureListener()

    assert await listener.start(70000, _echo) is False
    assert listener.state is ListenerState.STOPPED


@pytest.mark.asyncio
async def test_concurrent_starts_leave_one_server(port: int, port_factory: Callable[[], int]) -> None:
    """Test overlapping starts cannot orphan a server that stop never reaches."""
    other_port = port_factory()
    listener = CaptureListener()

    results = await asyncio.gather(listener.start(port, _echo), listener.start(other_port, _echo))
    assert sorted(results) == [False, True]
    await listener.stop()

    assert listener.state is ListenerState.STOPPED
    for p in (port, other_port):
        async with httpx.AsyncClient(base_url=f"http://127.0.0.1:{p}") as client:
            with pytest.raises(httpx.ConnectError):
                await client.get("/")


@pytest.mark.asyncio
async def test_stop_waits_for_pending_start(port: int) -> None:
    """Test a stop issued during startup runs after it and stops the server."""
    listener = CaptureListener()

    started, _ = await asyncio.gather(listener.start(port, _echo), listener.stop())

    assert started is True
    assert listener.state is ListenerState.STOPPED


def _port_is_free(port: int) -> bool:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            return False
    return True


@pytest.mark.asyncio
@pytest.mark.skipif(not _port_is_free(8980), reason="port 8980 is busy")
async def test_non_numeric_port_binds_default() -> None:
    """Test a non-numeric port string starts the listener on 8980."""
    listener = CaptureListener()

    assert await listener.start("abc", _echo)
    try:
        assert listener.port == 8980
        async with httpx.AsyncClient(base_url="http://127.0.0.1:8980") as client:
            assert (await client.get("/")).text == "Success"
    finally:
        await listener.stop()


@pytest.mark.parametrize(
    ("value", "expected"),
    [("8980", 8980), (" 9000 ", 9000), ("abc", 8980), ("", 8980), (None, 8980), (1234, 1234)],
)
def test_parse_port(value: str | int | None, expected: int) -> None:
    """Test non-numeric port strings fall back to 8980."""
    assert parse_port(value) == expected
