import httpx
import pytest

from coinboard.clients.coingecko import CoinGeckoClient, parse_prices
from coinboard.errors import (
    ErrorKind, MESSAGES, NetworkOrParseError, RateLimited, UpstreamHTTPError,
)
from coinboard.orchestrator import FetchOrchestrator
from coinboard.schemas import FetchSpec, PricePoint

BASE = "https://api.test/api/v3"


def client_for(handler):
    return CoinGeckoClient(base_url=BASE, transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_market_chart_request_shape():
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"prices": [[1, 2.0]]})

    client = client_for(handler)
    data = await client.market_chart("bitcoin", 30, "daily")
    await client.close()

    assert data == {"prices": [[1, 2.0]]}
    req = seen[0]
    assert req.url.path == "/api/v3/coins/bitcoin/market_chart"
    assert dict(req.url.params) == {"vs_currency": "usd", "days": "30", "interval": "daily"}
    assert req.headers["User-Agent"].startswith("coinboard/")


@pytest.mark.asyncio
async def test_simple_price_request_shape():
    def handler(request):
        assert request.url.path == "/api/v3/simple/price"
        assert request.url.params["ids"] == "ethereum"
        assert request.url.params["vs_currencies"] == "usd"
        return httpx.Response(200, json={"ethereum": {"usd": 3000}})

    client = client_for(handler)
    assert await client.simple_price("ethereum") == {"ethereum": {"usd": 3000}}
    await client.close()


@pytest.mark.asyncio
async def test_429_is_rate_limited():
    client = client_for(lambda r: httpx.Response(429, headers={"Retry-After": "30"}))
    with pytest.raises(RateLimited) as exc:
        await client.simple_price("bitcoin")
    assert exc.value.retry_after == "30"
    assert exc.value.kind is ErrorKind.RATE_LIMITED
    await client.close()


@pytest.mark.asyncio
async def test_non_2xx_is_upstream_error():
    client = client_for(lambda r: httpx.Response(404, json={"error": "coin not found"}))
    with pytest.raises(UpstreamHTTPError) as exc:
        await client.market_chart("nope", 7)
    assert exc.value.status_code == 404
    assert str(exc.value) == "Upstream error: 404"
    await client.close()


@pytest.mark.asyncio
async def test_malformed_json():
    client = client_for(lambda r: httpx.Response(200, content=b"<html>"))
    with pytest.raises(NetworkOrParseError):
        await client.market_chart("bitcoin", 7)
    await client.close()


@pytest.mark.asyncio
async def test_transport_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = client_for(handler)
    with pytest.raises(NetworkOrParseError):
        await client.simple_price("bitcoin")
    await client.close()


def test_parse_prices():
    assert parse_prices({"prices": [[1000, 1], [2000, 2.5]]}) == [
        PricePoint(timestamp=1000, price=1.0),
        PricePoint(timestamp=2000, price=2.5),
    ]
    with pytest.raises(NetworkOrParseError):
        parse_prices({"prices": [[1000]]})
    with pytest.raises(NetworkOrParseError):
        parse_prices([])


@pytest.mark.asyncio
async def test_orchestrator_surfaces_rate_limit_from_http():
    client = client_for(lambda r: httpx.Response(429))
    orch = FetchOrchestrator(client)
    orch.start_fetch(FetchSpec(coins=["bitcoin"], range_days=7))
    state = await orch.wait()
    await client.close()

    assert state.error == MESSAGES[ErrorKind.RATE_LIMITED]
    assert state.error_kind == "rate_limited"
