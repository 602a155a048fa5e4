"""Tests for the httpx-backed transport."""

import asyncio
import json
from decimal import Decimal

import httpx
import pytest

from poloniex_api.core.client import TradingClient
from poloniex_api.core.connections import HttpxTransport
from poloniex_api.exceptions import RequestTimeoutError, TransportError
from poloniex_api.signing import verify

URL = "https://poloniex.test/tradingApi"


def _transport(handler) -> tuple[HttpxTransport, httpx.AsyncClient]:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpxTransport(client), client


def test_post_forwards_headers_and_body() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = request.content
        seen["key"] = request.headers["Key"]
        seen["content_type"] = request.headers["Content-Type"]
        return httpx.Response(200, content=b'{"BTC":"1"}')

    transport, client = _transport(handler)
    headers = [("Key", "k"), ("Sign", "s"), ("Content-Type", "application/x-www-form-urlencoded")]

    async def run():
        async with client:
            return await transport.post(URL, headers, b"nonce=1&command=returnBalances", 3.0)

    response = asyncio.run(run())

    assert response.status_code == 200
    assert response.body == b'{"BTC":"1"}'
    assert seen == {
        "method": "POST",
        "url": URL,
        "body": b"nonce=1&command=returnBalances",
        "key": "k",
        "content_type": "application/x-www-form-urlencoded",
    }


def test_non_2xx_is_returned_not_raised() -> None:
    transport, client = _transport(lambda request: httpx.Response(403, content=b'{"error":"x"}'))

    async def run():
        async with client:
            return await transport.post(URL, [], b"", 3.0)

    assert asyncio.run(run()).status_code == 403


def test_read_timeout_maps_to_request_timeout() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    transport, client = _transport(handler)

    async def run():
        async with client:
            await transport.post(URL, [], b"", 0.5)

    with pytest.raises(RequestTimeoutError) as excinfo:
        asyncio.run(run())
    assert excinfo.value.timeout == 0.5
    assert excinfo.value.endpoint == URL


def test_connect_error_maps_to_transport_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport, client = _transport(handler)

    async def run():
        async with client:
            await transport.post(URL, [], b"", 3.0)

    with pytest.raises(TransportError) as excinfo:
        asyncio.run(run())
    assert not isinstance(excinfo.value, RequestTimeoutError)
    assert excinfo.value.endpoint == URL


def test_external_client_left_open() -> None:
    transport, client = _transport(lambda request: httpx.Response(200, content=b"{}"))

    async def run():
        await transport.aclose()
        closed = client.is_closed
        await client.aclose()
        return closed

    assert asyncio.run(run()) is False


def test_owned_client_created_lazily_and_closed() -> None:
    transport = HttpxTransport()
    assert not transport.is_connected()

    async def run():
        transport.client
        connected = transport.is_connected()
        await transport.aclose()
        return connected

    assert asyncio.run(run()) is True
    assert not transport.is_connected()


def test_trading_client_end_to_end() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert verify("secret", request.content, request.headers["Sign"])
        return httpx.Response(
            200,
            content=json.dumps(
                {"BTC": {"available": "0.3", "onOrders": "0.1", "btcValue": "0.4"}}
            ).encode(),
        )

    transport, http_client = _transport(handler)

    async def run():
        async with http_client:
            client = TradingClient("key", "secret", base_url=URL, transport=transport)
            return await client.return_complete_balances("all")

    result = asyncio.run(run())

    assert result.success
    assert result.value["BTC"].on_orders == Decimal("0.1")
