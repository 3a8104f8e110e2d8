"""papertrade main application."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import uvicorn
from fastapi import FastAPI

from papertrade.api.app import create_app
from papertrade.config_loader import AppConfig, load_config_with_overrides
from papertrade.constants import APP_NAME, LOG_FORMAT, Collection
from papertrade.market.quote_simulator import QuoteSimulator
from papertrade.persistence.collection_store import CollectionStore

logger = logging.getLogger(__name__)


class PaperTradeApp:
    """Main application orchestrator."""

    def __init__(
        self,
        config_path: str | Path | None = "config/config.yaml",
        host: str | None = None,
        port: int | None = None,
        data_dir: str | None = None,
    ):
        self.config_path = Path(config_path) if config_path is not None else None
        self._host_override = host
        self._port_override = port
        self._data_dir_override = data_dir

        self.config: AppConfig | None = None
        self.api: FastAPI | None = None

    def _setup_logging(self) -> None:
        level = self.config.environment.log_level.value if self.config else "INFO"
        logging.basicConfig(level=level, format=LOG_FORMAT)

    def initialize(self) -> FastAPI:
        """Load config and build the API application."""
        self.config = load_config_with_overrides(
            self.config_path.absolute() if self.config_path else None,
            host=self._host_override,
            port=self._port_override,
            data_dir=self._data_dir_override,
        )
        self._setup_logging()
        logger.info(f"Initializing {APP_NAME}...")

        self.api = create_app(self.config)
        return self.api

    def run(self) -> None:
        """Serve the API until interrupted."""
        api = self.api or self.initialize()
        server = self.config.server
        logger.info(f"Server running on http://{server.host}:{server.port}")
        uvicorn.run(api, host=server.host, port=server.port, log_config=None)

    def seed(self, reset: bool = False) -> int:
        """
        Write the configured seed quotes.

        With ``reset`` the quotes are overwritten and the orders and trades
        collections are emptied. Returns the number of seeded quotes, or 0
        if quotes were already present.
        """
        if self.config is None:
            self.initialize()
        return asyncio.run(self._seed(reset))

    async def _seed(self, reset: bool) -> int:
        store = CollectionStore(
            self.config.data_dir, strict_reads=self.config.environment.strict_reads
        )
        try:
            simulator = QuoteSimulator(store, self.config.simulator)
            written = await simulator.seed(self.config.seed.quotes, overwrite=reset)
            if reset:
                async with store.locked(Collection.ORDERS, Collection.TRADES):
                    await store.reset(Collection.ORDERS)
                    await store.reset(Collection.TRADES)
                logger.info("Orders and trades cleared")
            return len(self.config.seed.quotes) if written else 0
        finally:
            store.close()
