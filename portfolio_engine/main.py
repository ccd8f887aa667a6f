"""
Portfolio Command Center Engine - FastAPI Application

Serves the dashboard front-end and proxies Trading 212, CoinGecko and
Anthropic so API keys never reach the browser.
"""

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel, ConfigDict, Field

from portfolio_engine import __version__
from portfolio_engine.api import ai_routes, crypto_routes, t212_routes
from portfolio_engine.api.ai_routes import router as ai_router
from portfolio_engine.api.crypto_routes import router as crypto_router
from portfolio_engine.api.errors import APIError, api_error_handler
from portfolio_engine.api.t212_routes import router as t212_router
from portfolio_engine.config import Settings, get_settings, get_settings_dep
from portfolio_engine.logging import bind_request_id, get_logger, reset_request_id, setup_logging

# Setup logging
setup_logging(level=get_settings().log_level, json_output=get_settings().log_json)
logger = get_logger(__name__)


# =============================================================================
# Response Models
# =============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    timestamp: str
    version: str
    uptime_seconds: float


class ConfigResponse(BaseModel):
    """Which upstreams are configured (booleans only, never values)."""

    model_config = ConfigDict(populate_by_name=True)

    t212_configured: bool = Field(alias="t212Configured")
    coingecko_configured: bool = Field(alias="coingeckoConfigured")
    anthropic_configured: bool = Field(alias="anthropicConfigured")


# =============================================================================
# Application State
# =============================================================================


class AppState:
    """Application state container."""

    def __init__(self) -> None:
        self.start_time: datetime = datetime.now(UTC)


state = AppState()


# =============================================================================
# Lifecycle
# =============================================================================


def _status_line(configured: bool, missing_label: str = "Not configured") -> str:
    return "configured" if configured else missing_label


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    state.start_time = datetime.now(UTC)

    logger.info("Starting Portfolio Command Center v%s", __version__)
    logger.info("Server: http://%s:%d", settings.host, settings.port)
    logger.info("Trading 212: %s", _status_line(settings.has_t212_credentials))
    logger.info("CoinGecko: %s", _status_line(settings.has_coingecko_key, "using free tier"))
    logger.info("Anthropic: %s", _status_line(settings.has_anthropic_key))
    logger.debug("Effective config: %s", settings.get_redacted_config())

    yield

    logger.info("Shutting down Portfolio Command Center")

    for client in (
        t212_routes._t212_client,
        crypto_routes._coingecko_client,
        ai_routes._chat_client,
    ):
        if client is not None:
            await client.close()


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Portfolio Command Center",
    description="Dashboard backend proxying Trading 212, CoinGecko and Anthropic",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(APIError, api_error_handler)


@app.middleware("http")
async def request_id_middleware(request: Request, call_next: Any) -> Response:
    """Tag every log line emitted while serving a request with one ID."""
    request_id = request.headers.get("X-Request-ID") or uuid4().hex[:12]
    token = bind_request_id(request_id)
    try:
        response = await call_next(request)
    finally:
        reset_request_id(token)
    response.headers["X-Request-ID"] = request_id
    return response


# Include API routers
app.include_router(t212_router)
app.include_router(crypto_router)
app.include_router(ai_router)


# =============================================================================
# REST Endpoints
# =============================================================================


@app.get("/api/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Health check endpoint.

    Returns current status, version, and uptime.
    """
    now = datetime.now(UTC)
    uptime = (now - state.start_time).total_seconds()

    return HealthResponse(
        status="ok",
        timestamp=now.isoformat(),
        version=__version__,
        uptime_seconds=round(uptime, 2),
    )


@app.get("/api/config", response_model=ConfigResponse)
async def config(settings: Settings = Depends(get_settings_dep)) -> ConfigResponse:
    """
    Report which upstream APIs are configured.

    Sensitive values are not exposed.
    """
    return ConfigResponse(
        t212_configured=settings.has_t212_credentials,
        coingecko_configured=settings.has_coingecko_key,
        anthropic_configured=settings.has_anthropic_key,
    )


@app.get("/", response_model=None)
async def root(settings: Settings = Depends(get_settings_dep)) -> Response | dict[str, Any]:
    """Serve the dashboard, or API info when no front-end is bundled."""
    index = settings.static_dir / "index.html"
    if index.is_file():
        return FileResponse(index)
    return {
        "name": "Portfolio Command Center",
        "version": __version__,
        "docs": "/docs",
        "health": "/api/health",
    }


# Front-end assets; registered last so API routes win
if get_settings().static_dir.is_dir():
    app.mount(
        "/",
        StaticFiles(directory=get_settings().static_dir, html=True),
        name="static",
    )


# =============================================================================
# Entry Point
# =============================================================================


def main() -> None:
    """Run the server."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "portfolio_engine.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.env.value == "development",
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
