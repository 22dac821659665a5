from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from .clients.coingecko import close_client, get_client
from .config import settings
from .logging_setup import configure_logging
from .orchestrator import FetchOrchestrator, MarketDataClient
from .routers.dashboard import router as dashboard_router
from .routers.proxy import router as proxy_router
from .view import DashboardView

@asynccontextmanager
async def lifespan(app: FastAPI):
    client = app.state.market_client or get_client()
    app.state.dashboard = DashboardView(FetchOrchestrator(client, align=settings.merge_align))
    yield
    await app.state.dashboard.close()
    await close_client()

def create_app(client: MarketDataClient | None = None) -> FastAPI:
    """Build the app. Passing `client` replaces CoinGecko for both the proxy and the dashboard."""
    configure_logging(settings.log_level)
    app = FastAPI(title="Coinboard", lifespan=lifespan)
    app.state.market_client = client
    if client is not None:
        app.dependency_overrides[get_client] = lambda: client

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(proxy_router)
    app.include_router(dashboard_router)
    return app

app = create_app()

def serve() -> None:
    uvicorn.run("coinboard.main:app", host=settings.host, port=settings.port)
