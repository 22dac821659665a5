"""
Fetch orchestration for the dashboard.

One fetch cycle (a session) runs per selection. Starting a new session
cancels the previous one and bumps the generation counter; a session may
only write state while its generation is still the current one.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Dict, List, Optional, Protocol, Tuple

from .clients.coingecko import parse_prices
from .errors import Canceled, CoinNotFound, ErrorKind, MESSAGES, classify
from .merge import Align, merge_series
from .schemas import DashboardState, FetchSpec, PricePoint

logger = logging.getLogger(__name__)


class MarketDataClient(Protocol):
    async def simple_price(self, coin: str) -> Dict: ...

    async def market_chart(self, coin: str, days: int, interval: str) -> Dict: ...


class FetchOrchestrator:
    """Owns the dashboard state; every mutation goes through this class."""

    def __init__(self, client: MarketDataClient, align: Align = "index"):
        self._client = client
        self._align = align
        self._state = DashboardState()
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def state(self) -> DashboardState:
        return self._state.model_copy(deep=True)

    @property
    def generation(self) -> int:
        return self._generation

    def start_fetch(self, spec: FetchSpec) -> asyncio.Task:
        """Supersede any running session and start a new one. Must run inside the event loop."""
        if self._task is not None and not self._task.done():
            self._task.cancel()

        self._generation += 1
        gen = self._generation
        self._state.status = "loading"
        self._state.error = None
        self._state.error_kind = None
        self._state.generation = gen
        self._state.spec = spec

        logger.info(f"[FETCH] #{gen} start coins={spec.coins} days={spec.range_days}")
        self._task = asyncio.create_task(self._run(gen, spec), name=f"coinboard-fetch-{gen}")
        return self._task

    async def wait(self) -> DashboardState:
        """Wait until the latest session has finished, including ones started meanwhile."""
        while self._task is not None and not self._task.done():
            await asyncio.wait([self._task])
        return self.state

    async def close(self) -> None:
        self._generation += 1
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.wait([self._task])
        self._task = None

    # ─── Session ───

    def _check(self, gen: int) -> None:
        if gen != self._generation:
            raise Canceled(f"session #{gen} superseded by #{self._generation}")

    async def _run(self, gen: int, spec: FetchSpec) -> None:
        try:
            if spec.multi:
                price = None
                series = await self._fetch_histories(gen, spec)
            else:
                price, series = await self._fetch_single(gen, spec)
        except asyncio.CancelledError:
            logger.debug(f"[FETCH] #{gen} canceled")
            return
        except Exception as exc:
            kind = classify(exc)
            if kind is ErrorKind.CANCELED or gen != self._generation:
                logger.debug(f"[FETCH] #{gen} dropped: {exc}")
                return
            logger.warning(f"[FETCH] #{gen} failed ({kind.value}): {exc}")
            self._commit_error(kind)
            return

        if gen != self._generation:
            return
        self._state.status = "idle"
        self._state.error = None
        self._state.error_kind = None
        self._state.price = price
        self._state.series = series
        self._state.rows = merge_series(series, spec.coins, self._align)
        logger.info(f"[FETCH] #{gen} done rows={len(self._state.rows)}")

    def _commit_error(self, kind: ErrorKind) -> None:
        # Stale data is never shown next to an error
        self._state.status = "idle"
        self._state.error = MESSAGES[kind]
        self._state.error_kind = kind.value
        self._state.price = None
        self._state.series = {}
        self._state.rows = []

    async def _fetch_single(self, gen: int, spec: FetchSpec) -> Tuple[float, Dict[str, List[PricePoint]]]:
        coin = spec.coins[0]
        data = await self._client.simple_price(coin)
        self._check(gen)

        entry = data.get(coin)
        if not isinstance(entry, dict) or entry.get("usd") is None:
            raise CoinNotFound(coin)
        price = float(entry["usd"])

        payload = await self._client.market_chart(coin, spec.range_days, spec.interval)
        self._check(gen)
        return price, {coin: parse_prices(payload)}

    async def _fetch_histories(self, gen: int, spec: FetchSpec) -> Dict[str, List[PricePoint]]:
        # Strictly one request at a time (upstream rate limit)
        series: Dict[str, List[PricePoint]] = {}
        for coin in spec.coins:
            payload = await self._client.market_chart(coin, spec.range_days, spec.interval)
            self._check(gen)
            series[coin] = parse_prices(payload)
        return series
