from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List, Literal

class Settings(BaseSettings):
    # CORS allowed origins for the dashboard API
    allowed_origins: List[str] = ["*"]

    # CoinGecko upstream
    coingecko_base_url: str = "https://api.coingecko.com/api/v3"
    coingecko_api_key: str | None = None
    user_agent: str = "coinboard/1.0 (+https://github.com/coinboard)"
    # None means wait until the request is superseded
    upstream_timeout: float | None = None

    # Dashboard behaviour
    debounce_seconds: float = 0.5
    default_coins: List[str] = ["bitcoin"]
    default_range_days: int = 120
    merge_align: Literal["index", "timestamp"] = "index"

    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    # Load .env file automatically if present
    model_config = SettingsConfigDict(
        env_prefix="COINBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False
    )

# Create a single settings instance
settings = Settings()
