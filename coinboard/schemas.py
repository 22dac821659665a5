from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Any, Literal

# {"date": "YYYY-MM-DD", "<coin>": price, ...}
MergedRow = dict[str, Any]

class PricePoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: int  # ms since epoch
    price: float

class FetchSpec(BaseModel):
    coins: list[str] = Field(min_length=1)
    range_days: int = Field(gt=0)
    interval: Literal["daily"] = "daily"

    @field_validator("coins")
    @classmethod
    def _normalize_coins(cls, v: list[str]) -> list[str]:
        coins = [c.strip().lower() for c in v]
        if any(not c for c in coins):
            raise ValueError("coin identifiers must be non-empty")
        return coins

    @property
    def multi(self) -> bool:
        return len(self.coins) > 1

class DashboardState(BaseModel):
    status: Literal["idle", "loading"] = "idle"
    error: str | None = None
    error_kind: str | None = None
    price: float | None = None
    series: dict[str, list[PricePoint]] = Field(default_factory=dict)
    rows: list[MergedRow] = Field(default_factory=list)
    generation: int = 0
    spec: FetchSpec | None = None

class SelectionUpdate(BaseModel):
    coins: list[str] | None = Field(default=None, min_length=1)
    range_days: int | None = Field(default=None, gt=0)

class DashboardRender(BaseModel):
    coins: list[str]
    range_days: int
    loading: bool
    # coins the displayed price/rows were fetched for
    shown_coins: list[str] = Field(default_factory=list)
    error: str | None = None
    price: float | None = None
    rows: list[MergedRow] = Field(default_factory=list)

class ProxyError(BaseModel):
    error: str
    details: str | None = None
