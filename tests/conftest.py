import asyncio

import pytest

DAY_MS = 86_400_000
T0 = 1_700_000_000_000  # 2023-11-14 UTC


def make_chart(n, start=100.0, step=1.0, t0=T0):
    return {"prices": [[t0 + i * DAY_MS, start + i * step] for i in range(n)]}


class FakeMarketData:
    """In-memory stand-in for CoinGeckoClient that records call order.

    `gates` holds asyncio.Events keyed by (kind, coin); a gated call blocks
    until the event is set. With `ignore_cancel`, a gated call keeps waiting
    through a cancellation, like a request that still completes remotely.
    """

    def __init__(self, prices=None, charts=None, errors=None, ignore_cancel=False):
        self.prices = prices or {}
        self.charts = charts or {}
        self.errors = errors or {}
        self.gates = {}
        self.ignore_cancel = ignore_cancel
        self.calls = []

    async def simple_price(self, coin, vs_currency="usd"):
        await self._serve("price", coin)
        return {coin: {"usd": self.prices[coin]}} if coin in self.prices else {}

    async def market_chart(self, coin, days, interval="daily", vs_currency="usd"):
        await self._serve("chart", coin)
        return self.charts[coin]

    async def _serve(self, kind, coin):
        self.calls.append(("start", kind, coin))
        gate = self.gates.get((kind, coin))
        if gate is None:
            await asyncio.sleep(0)
        else:
            try:
                await gate.wait()
            except asyncio.CancelledError:
                if not self.ignore_cancel:
                    raise
                await gate.wait()
        self.calls.append(("end", kind, coin))
        err = self.errors.get((kind, coin))
        if err is not None:
            raise err

    def started(self, kind):
        return [c for s, k, c in self.calls if s == "start" and k == kind]


async def settle(predicate, rounds=50):
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


@pytest.fixture
def fake():
    return FakeMarketData(
        prices={"bitcoin": 65000.0, "ethereum": 3400.5},
        charts={
            "bitcoin": make_chart(5, 60000.0, 100.0),
            "ethereum": make_chart(5, 3000.0, 10.0),
            "solana": make_chart(5, 150.0, 1.0),
        },
    )
