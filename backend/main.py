"""Plexman — FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings as default_settings
from routers import auth, proxy
from services.forwarder import ProxyForwarder
from services.plex_tv import PlexTvClient


def create_app(
    settings: Optional[Settings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup: one pooled client shared by the login flow and the proxy
        async with httpx.AsyncClient(
            timeout=settings.upstream_timeout, follow_redirects=True, transport=transport,
        ) as http:
            app.state.settings = settings
            app.state.plex_tv = PlexTvClient(http, settings)
            app.state.forwarder = ProxyForwarder(http, settings)
            logging.getLogger(__name__).info(
                "Proxying to the %s server address", settings.deployment_mode.value,
            )
            yield
        # Shutdown: client closed by the context manager

    app = FastAPI(
        title="Plexman",
        description="Plex pairing broker and caching read-only proxy",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(auth.router)
    app.include_router(proxy.router)

    @app.get("/api/health")
    async def health():
        return {"status": "ok"}

    return app


logging.basicConfig(
    level=default_settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=default_settings.host, port=default_settings.port)
