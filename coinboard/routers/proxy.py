import logging
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from ..clients.coingecko import CoinGeckoClient, get_client
from ..errors import MissingParameter, NetworkOrParseError, UpstreamHTTPError, user_message
from ..schemas import ProxyError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["proxy"])

PROXY_FAILURE = "Failed to fetch CoinGecko data"

def _require(**params: str | None) -> None:
    missing = [name for name, value in params.items() if not value]
    if missing:
        raise MissingParameter(f"missing query params: {', '.join(missing)}")

@router.get("/coins")
async def proxy_market_chart(
    coin: str | None = None,
    days: str | None = None,
    interval: str | None = None,
    client: CoinGeckoClient = Depends(get_client),
):
    """
    Stateless pass-through to CoinGecko /coins/{coin}/market_chart (USD).
    Relays the upstream JSON as-is with a permissive CORS header.
    """
    try:
        _require(coin=coin, days=days, interval=interval)
    except MissingParameter as e:
        logger.info(f"[PROXY] rejected: {e}")
        body = ProxyError(error=user_message(e))
        return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True))

    try:
        data = await client.market_chart(coin, days, interval)
    except UpstreamHTTPError as e:
        logger.error(f"[PROXY] upstream returned {e.status_code} for coin={coin} days={days} interval={interval}")
        details = str(e)
    except NetworkOrParseError as e:
        logger.error(f"[PROXY] network/parse failure for coin={coin}: {e}")
        details = str(e)
    else:
        return JSONResponse(content=data, headers={"Access-Control-Allow-Origin": "*"})

    body = ProxyError(error=PROXY_FAILURE, details=details)
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True))
