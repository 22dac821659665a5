"""
Error kinds surfaced by the proxy and the fetch orchestrator.

Every failure is classified into exactly one kind before it reaches a caller;
raw transport exceptions never leave this package.
"""
import asyncio
from enum import Enum


class ErrorKind(str, Enum):
    MISSING_PARAMETER = "missing_parameter"
    UPSTREAM_HTTP_ERROR = "upstream_http_error"
    RATE_LIMITED = "rate_limited"
    COIN_NOT_FOUND = "coin_not_found"
    CANCELED = "canceled"
    NETWORK_OR_PARSE_ERROR = "network_or_parse_error"


GENERIC_MESSAGE = "Error fetching data."

MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.MISSING_PARAMETER: "Missing required query params",
    ErrorKind.UPSTREAM_HTTP_ERROR: GENERIC_MESSAGE,
    ErrorKind.RATE_LIMITED: "Rate limited by the market-data API. Please wait and try again.",
    ErrorKind.COIN_NOT_FOUND: "Coin not found. Try another name.",
    ErrorKind.CANCELED: "",
    ErrorKind.NETWORK_OR_PARSE_ERROR: GENERIC_MESSAGE,
}


class CoinboardError(Exception):
    kind: ErrorKind = ErrorKind.NETWORK_OR_PARSE_ERROR


class MissingParameter(CoinboardError):
    kind = ErrorKind.MISSING_PARAMETER


class UpstreamHTTPError(CoinboardError):
    kind = ErrorKind.UPSTREAM_HTTP_ERROR

    def __init__(self, status_code: int, url: str = ""):
        super().__init__(f"Upstream error: {status_code}")
        self.status_code = status_code
        self.url = url


class RateLimited(UpstreamHTTPError):
    kind = ErrorKind.RATE_LIMITED

    def __init__(self, url: str = "", retry_after: str | None = None):
        super().__init__(429, url)
        self.retry_after = retry_after


class CoinNotFound(CoinboardError):
    kind = ErrorKind.COIN_NOT_FOUND

    def __init__(self, coin: str):
        super().__init__(f"Coin not found: {coin}")
        self.coin = coin


class Canceled(CoinboardError):
    kind = ErrorKind.CANCELED


class NetworkOrParseError(CoinboardError):
    kind = ErrorKind.NETWORK_OR_PARSE_ERROR


def classify(exc: BaseException) -> ErrorKind:
    if isinstance(exc, CoinboardError):
        return exc.kind
    if isinstance(exc, asyncio.CancelledError):
        return ErrorKind.CANCELED
    return ErrorKind.NETWORK_OR_PARSE_ERROR


def user_message(exc: BaseException) -> str:
    return MESSAGES[classify(exc)]
