from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, Response
from fastapi.responses import RedirectResponse
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from picaloco_docs.api.routes.docs import DOCS_PATH, router as docs_router
from picaloco_docs.api.routes.health import router as health_router
from picaloco_docs.api.routes.spec import router as spec_router
from picaloco_docs.config import ServiceConfig, load_config
from picaloco_docs.logging_config import install_secret_redaction
from picaloco_docs.services.spec_fetcher import SpecFetcher
from picaloco_docs.services.spec_provider import SpecProvider
from picaloco_docs.tracing import configure_tracing

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[ServiceConfig] = None,
    fetcher: Optional[SpecFetcher] = None,
) -> FastAPI:
    """
    Build the documentation relay.

    Without `config`, the environment is read when the app starts; missing
    SUPABASE_URL/SUPABASE_ANON_KEY raises ConfigMissingError there and the
    server never starts accepting requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        cfg = config if config is not None else load_config()
        install_secret_redaction(cfg.supabase_anon_key)

        provider = SpecProvider(cfg, fetcher if fetcher is not None else SpecFetcher(cfg))
        app.state.config = cfg
        app.state.spec_provider = provider

        provider.start()
        logger.info(f"Documentation available at {DOCS_PATH} (backend {cfg.supabase_url})")
        try:
            yield
        finally:
            await provider.aclose()

    app = FastAPI(
        title="Pica Loco API Documentation",
        lifespan=lifespan,
        # The UI lives at /docs and documents Supabase, not this relay
        docs_url=None,
        redoc_url=None,
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    app.include_router(docs_router)
    app.include_router(spec_router)
    app.include_router(health_router)

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url=DOCS_PATH)

    @app.get("/metrics", include_in_schema=False)
    def metrics():
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    # ------------------------------------------------------------------
    # Observability
    # ------------------------------------------------------------------
    configure_tracing()
    FastAPIInstrumentor.instrument_app(app)

    return app

