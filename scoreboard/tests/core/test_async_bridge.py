import asyncio
import json

import httpx
import pytest

from scoreboard.core.bridge import AsyncScoreboardBridge
from scoreboard.core.errors import ConnectivityError, ProtocolError


class _EchoDevice:
    def __init__(self) -> None:
        self.state = {"screen_on": True, "sport": 1}
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and request.url.path == "/":
            return httpx.Response(200, json=self.state)
        if request.method == "POST" and request.url.path == "/setPower":
            self.state["screen_on"] = json.loads(request.content)["screen_on"]
            return httpx.Response(200)
        if request.method == "POST" and request.url.path == "/setSport":
            self.state["sport"] = json.loads(request.content)["sport"]
            return httpx.Response(200)
        return httpx.Response(404)


def _run(device, operation):
    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(device)) as client:
            bridge = AsyncScoreboardBridge("10.0.0.8", client=client, timeout=1.0)
            return await operation(bridge)

    return asyncio.run(runner())


def test_async_get_power_and_input():
    device = _EchoDevice()
    power = _run(device, lambda bridge: bridge.get_power())
    sport = _run(device, lambda bridge: bridge.get_active_input())
    assert power.value is True
    assert sport.value == 1
    assert str(device.requests[0].url) == "http://10.0.0.8:5005/"


def test_async_set_then_get_round_trip():
    device = _EchoDevice()
    device.state["screen_on"] = False

    async def operation(bridge):
        written = await bridge.set_power(True)
        assert written.ok
        return await bridge.get_power()

    assert _run(device, operation).value is True
    assert json.loads(device.requests[0].content) == {"screen_on": True}


def test_async_set_active_input():
    device = _EchoDevice()
    result = _run(device, lambda bridge: bridge.set_active_input(3))
    assert result.ok
    assert device.state["sport"] == 3


def test_async_overlapping_calls_are_independent():
    device = _EchoDevice()

    async def operation(bridge):
        return await asyncio.gather(
            bridge.get_power(), bridge.get_active_input(), bridge.get_state()
        )

    power, sport, state = _run(device, operation)
    assert (power.value, sport.value) == (True, 1)
    assert state.value.screen_on is True
    assert len(device.requests) == 3


@pytest.mark.parametrize(
    "exc_type",
    [httpx.ConnectError, httpx.ReadTimeout, httpx.ConnectTimeout],
)
def test_async_transport_failures(exc_type):
    def handler(request: httpx.Request) -> httpx.Response:
        raise exc_type("failed", request=request)

    result = _run(handler, lambda bridge: bridge.get_power())
    assert isinstance(result.error, ConnectivityError)
    assert isinstance(result.error.__cause__, exc_type)


def test_async_non_200():
    result = _run(lambda request: httpx.Response(502), lambda bridge: bridge.set_power(False))
    assert isinstance(result.error, ConnectivityError)
    assert result.error.status == 502


def test_async_bad_body():
    result = _run(lambda request: httpx.Response(200, text="oops"), lambda bridge: bridge.get_power())
    assert isinstance(result.error, ProtocolError)


@pytest.mark.parametrize("address", ["192.168.1.5:80", "bad\thost"])
def test_async_unusable_literal_address_is_connectivity_error(address):
    device = _EchoDevice()

    async def runner():
        async with httpx.AsyncClient(transport=httpx.MockTransport(device)) as client:
            bridge = AsyncScoreboardBridge(address, client=client, timeout=1.0)
            return await bridge.get_power(), await bridge.set_power(True)

    read, write = asyncio.run(runner())
    assert isinstance(read.error, ConnectivityError)
    assert isinstance(write.error, ConnectivityError)
    assert device.requests == []


def test_async_unsupported_protocol_is_connectivity_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.UnsupportedProtocol("no scheme", request=request)

    result = _run(handler, lambda bridge: bridge.get_active_input())
    assert isinstance(result.error, ConnectivityError)
