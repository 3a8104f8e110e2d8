"""FastAPI application factory."""

from __future__ import annotations

import logging
import random
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from papertrade.api.routes import router
from papertrade.config_loader import AppConfig
from papertrade.constants import APP_NAME
from papertrade.exceptions import InvalidOrderRequest, PaperTradeError
from papertrade.market.quote_simulator import QuoteSimulator
from papertrade.persistence.collection_store import CollectionStore
from papertrade.services.order_service import OrderService

logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def create_app(
    config: AppConfig | None = None,
    store: CollectionStore | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    """
    Build the API application.

    When no store is passed one is created from ``config`` and closed on
    shutdown. Startup seeds the configured quotes into an empty stocks
    collection.
    """
    config = config or AppConfig()
    owns_store = store is None
    store = store or CollectionStore(config.data_dir, strict_reads=config.environment.strict_reads)
    simulator = QuoteSimulator(store, config.simulator, rng=rng)
    order_service = OrderService(store)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await simulator.seed(config.seed.quotes)
        logger.info(f"{APP_NAME} API ready. Data dir: {store.data_dir.resolve()}")
        yield
        if owns_store:
            store.close()

    app = FastAPI(title=APP_NAME, lifespan=lifespan)
    app.state.config = config
    app.state.store = store
    app.state.simulator = simulator
    app.state.order_service = order_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PaperTradeError)
    async def handle_domain_error(request: Request, exc: PaperTradeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        return _error(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'][1:]) or 'body'}: {err['msg']}"
            for err in exc.errors()
        )
        error = InvalidOrderRequest(f"Invalid request: {problems}")
        return _error(error.status_code, error.message)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return _error(500, "Internal server error")

    app.include_router(router)

    static_dir = config.server.static_dir
    if static_dir:
        if Path(static_dir).is_dir():
            app.mount("/", StaticFiles(directory=static_dir, html=True), name="ui")
        else:
            logger.warning(f"Static directory not found, UI disabled: {static_dir}")

    return app
