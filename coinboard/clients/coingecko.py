import httpx
import logging
from typing import Optional, Dict, Any, List
from urllib.parse import quote
from ..config import settings
from ..errors import NetworkOrParseError, RateLimited, UpstreamHTTPError
from ..schemas import PricePoint

logger = logging.getLogger(__name__)

def _headers() -> Dict[str, str]:
    headers = {"User-Agent": settings.user_agent}
    if settings.coingecko_api_key:
        # CoinGecko v3 Pro header (if you have a key)
        headers["x-cg-pro-api-key"] = settings.coingecko_api_key
    return headers

def parse_prices(payload: Any) -> List[PricePoint]:
    """
    Turn a market_chart payload into PricePoints, keeping upstream order.
    Raises NetworkOrParseError if `prices` is missing or malformed.
    """
    try:
        return [PricePoint(timestamp=int(ts), price=float(price)) for ts, price in payload["prices"]]
    except (KeyError, TypeError, ValueError) as e:
        raise NetworkOrParseError(f"Malformed market_chart payload: {e}") from e

class CoinGeckoClient:
    """
    Async CoinGecko v3 wrapper. One request per call: no retry, no cache.
    Non-2xx responses raise UpstreamHTTPError (RateLimited for 429),
    transport and JSON failures raise NetworkOrParseError.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.coingecko_base_url).rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Any:
        url = f"{self.base_url}{path}"
        try:
            r = await self._client.get(url, params=params, headers=_headers())
        except httpx.HTTPError as e:
            raise NetworkOrParseError(f"Request to {url} failed: {e!r}") from e
        if r.status_code == 429:
            logger.warning(f"[COINGECKO] 429 from {url} (Retry-After={r.headers.get('Retry-After')})")
            raise RateLimited(url, r.headers.get("Retry-After"))
        if not r.is_success:
            raise UpstreamHTTPError(r.status_code, url)
        try:
            return r.json()
        except ValueError as e:
            raise NetworkOrParseError(f"Malformed JSON from {url}") from e

    async def simple_price(self, coin: str, vs_currency: str = "usd") -> Dict[str, Any]:
        data = await self._get_json("/simple/price", {"ids": coin, "vs_currencies": vs_currency})
        if not isinstance(data, dict):
            raise NetworkOrParseError("simple/price did not return an object")
        return data

    async def market_chart(self, coin: str, days: int | str, interval: str = "daily",
                           vs_currency: str = "usd") -> Any:
        path = f"/coins/{quote(str(coin), safe='')}/market_chart"
        params = {"vs_currency": vs_currency, "days": days, "interval": interval}
        return await self._get_json(path, params)

    async def close(self) -> None:
        await self._client.aclose()

_client: CoinGeckoClient | None = None

def get_client() -> CoinGeckoClient:
    global _client
    if _client is None:
        _client = CoinGeckoClient(timeout=settings.upstream_timeout)
    return _client

async def close_client() -> None:
    global _client
    if _client is not None:
        await _client.close()
        _client = None
