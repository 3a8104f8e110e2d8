"""Simulated quotes."""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable

from papertrade.config_loader import SeedQuoteConfig, SimulatorConfig
from papertrade.constants import Collection
from papertrade.models import Quote
from papertrade.persistence.collection_store import CollectionStore

logger = logging.getLogger(__name__)


class QuoteSimulator:
    """
    Owns the stored quote set and moves it with a random walk.

    ``refresh()`` is the only mutating read: every call perturbs every
    price and persists the result, so listing quotes is not idempotent.
    ``quotes()``, ``get()`` and ``search()`` never touch stored prices.
    """

    def __init__(
        self,
        store: CollectionStore,
        config: SimulatorConfig | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store
        self.config = config or SimulatorConfig()
        self.rng = rng or random.Random()

    async def quotes(self) -> dict[str, Quote]:
        raw = await self.store.load(Collection.STOCKS)
        return {symbol: Quote.from_dict(data) for symbol, data in raw.items()}

    async def get(self, symbol: str) -> Quote | None:
        return (await self.quotes()).get(symbol)

    async def refresh(self) -> dict[str, Quote]:
        """Apply one perturbation to every quote, persist, and return the new set."""
        async with self.store.locked(Collection.STOCKS):
            quotes = await self.quotes()
            for quote in quotes.values():
                self._perturb(quote)
            await self.store.save(
                Collection.STOCKS, {symbol: q.to_dict() for symbol, q in quotes.items()}
            )
        logger.debug(f"Refreshed {len(quotes)} quotes")
        return quotes

    def _perturb(self, quote: Quote) -> None:
        step = self.config.max_step
        change = self.rng.uniform(-step, step)
        quote.price = max(self.config.price_floor, quote.price + change)
        quote.change = change
        # Post-update price is the denominator
        quote.change_percent = change / quote.price * 100

    async def search(self, query: str) -> list[Quote]:
        """Case-insensitive substring match against symbol or name."""
        needle = query.lower()
        return [
            q
            for q in (await self.quotes()).values()
            if needle in q.symbol.lower() or needle in q.name.lower()
        ]

    async def seed(self, quotes: Iterable[SeedQuoteConfig], overwrite: bool = False) -> bool:
        """
        Write the initial quote set.

        Existing quotes are left alone unless ``overwrite`` is set.
        Returns True if anything was written.
        """
        async with self.store.locked(Collection.STOCKS):
            existing = await self.store.load(Collection.STOCKS)
            if existing and not overwrite:
                logger.info(f"Quotes already present ({len(existing)}), skipping seed")
                return False

            seeded = {
                q.symbol: Quote(symbol=q.symbol, name=q.name, price=q.price).to_dict()
                for q in quotes
            }
            await self.store.save(Collection.STOCKS, seeded)
        logger.info(f"Seeded {len(seeded)} quotes: {', '.join(seeded)}")
        return True
