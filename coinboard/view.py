"""
DashboardView: the selection state behind the dashboard page.

The view owns the debounce timer. Coin and range changes schedule a fetch
after the quiet period; refresh() fetches right away. Everything it shows
comes from the orchestrator's state.
"""

from __future__ import annotations
import asyncio
import logging
from typing import Iterable, List, Optional, Union

from .config import settings
from .debounce import Debouncer
from .orchestrator import FetchOrchestrator
from .schemas import DashboardRender, FetchSpec

logger = logging.getLogger(__name__)


def _coin_list(coins: Union[str, Iterable[str]]) -> List[str]:
    # A bare string is one coin id, not a sequence of characters
    if isinstance(coins, str):
        return [coins]
    return list(coins)


class DashboardView:

    def __init__(
        self,
        orchestrator: FetchOrchestrator,
        coins: Optional[Iterable[str]] = None,
        range_days: Optional[int] = None,
        debounce_seconds: Optional[float] = None,
    ):
        self.orchestrator = orchestrator
        spec = FetchSpec(
            coins=_coin_list(coins) if coins is not None else list(settings.default_coins),
            range_days=range_days if range_days is not None else settings.default_range_days,
        )
        self.coins = spec.coins
        self.range_days = spec.range_days
        delay = settings.debounce_seconds if debounce_seconds is None else debounce_seconds
        self._debouncer = Debouncer(delay, self.orchestrator.start_fetch)

    def current_spec(self) -> FetchSpec:
        return FetchSpec(coins=self.coins, range_days=self.range_days)

    def update(self, coins: Optional[Union[str, Iterable[str]]] = None, range_days: Optional[int] = None) -> None:
        """Apply a selection change and (re)schedule the debounced fetch."""
        spec = FetchSpec(
            coins=_coin_list(coins) if coins is not None else self.coins,
            range_days=range_days if range_days is not None else self.range_days,
        )
        self.coins = spec.coins
        self.range_days = spec.range_days
        logger.debug(f"[VIEW] selection coins={spec.coins} days={spec.range_days}")
        self._debouncer.trigger(spec)

    def select_coins(self, coins: Union[str, Iterable[str]]) -> None:
        self.update(coins=coins)

    def select_range(self, days: int) -> None:
        self.update(range_days=days)

    def refresh(self) -> asyncio.Task:
        self._debouncer.cancel()
        return self.orchestrator.start_fetch(self.current_spec())

    @property
    def fetch_scheduled(self) -> bool:
        return self._debouncer.pending

    def render(self) -> DashboardRender:
        state = self.orchestrator.state
        loading = state.status == "loading"
        show = not loading and state.error is None
        return DashboardRender(
            coins=self.coins,
            range_days=self.range_days,
            loading=loading,
            error=state.error,
            shown_coins=list(state.spec.coins) if show and state.spec is not None else [],
            price=state.price if show else None,
            rows=state.rows if show else [],
        )

    async def close(self) -> None:
        self._debouncer.cancel()
        await self.orchestrator.close()
