"""FastAPI application entry point."""

import logging
import os
import time
from collections import defaultdict

import structlog
import uvicorn
from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from lingo_quest.api.routes import router
from lingo_quest.api.websocket import handle_client_websocket
from lingo_quest.config import Settings, get_settings
from lingo_quest.services import build_services
from lingo_quest.storage.profile_store import ProfileStore

_WS_RATE_LIMIT = 10  # max WS connections per IP per window
_WS_RATE_WINDOW = 60  # seconds

# Configure structlog based on environment
is_production = os.getenv("ENV", "development").lower() == "production"

if is_production:
    # Production: JSON format for machine parsing
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
else:
    # Development: console format for human readability
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def create_app(settings: Settings | None = None, store: ProfileStore | None = None) -> FastAPI:
    """Build the application with its services attached to ``app.state``.

    Args:
        settings: Settings to use; defaults to the cached application settings.
        store: Profile store override; defaults to the configured backend.
    """
    settings = settings or get_settings()
    services = build_services(settings, store)
    ws_connection_times: dict[str, list[float]] = defaultdict(list)

    app = FastAPI(title="Lingo Quest", version="0.1.0")
    app.state.services = services

    allowed_origins_env = os.getenv(
        "ALLOWED_ORIGINS", "http://localhost:8000,http://127.0.0.1:8000"
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in allowed_origins_env.split(",")],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        """Optional APP_SECRET authentication; health stays public."""
        if not settings.app_secret or request.url.path == "/api/health":
            return await call_next(request)
        if request.headers.get("X-App-Secret", "") != settings.app_secret:
            return JSONResponse({"error": "Unauthorized"}, status_code=401)
        return await call_next(request)

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket) -> None:
        """Client WebSocket endpoint with per-IP rate limiting."""
        if settings.app_secret and websocket.headers.get("X-App-Secret") != settings.app_secret:
            await websocket.close(code=1008, reason="Unauthorized")
            return
        client_ip = websocket.client.host if websocket.client else "unknown"
        now = time.time()
        times = ws_connection_times[client_ip]
        times[:] = [t for t in times if now - t < _WS_RATE_WINDOW]
        if len(times) >= _WS_RATE_LIMIT:
            await websocket.close(code=1008, reason="Rate limit exceeded")
            return
        times.append(now)
        await handle_client_websocket(websocket, services)

    return app


app = create_app()


def main() -> None:
    """Run the application."""
    settings = get_settings()
    uvicorn.run(
        "lingo_quest.main:app",
        host=settings.host,
        port=settings.port,
        reload=False,
        log_level="info",
    )


if __name__ == "__main__":
    main()
