"""Tests for QuoteSimulator."""

import random

import pytest

from papertrade.config_loader import SeedQuoteConfig, SimulatorConfig
from papertrade.constants import Collection
from papertrade.market.quote_simulator import QuoteSimulator
from papertrade.persistence.collection_store import CollectionStore


class FixedStep:
    """Stands in for random.Random with a fixed draw."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def uniform(self, a, b):
        self.calls.append((a, b))
        return self.value


@pytest.mark.asyncio
async def test_refresh_applies_perturbation(store, read_collection):
    rng = FixedStep(0.5)
    sim = QuoteSimulator(store, SimulatorConfig(max_step=1.0), rng=rng)

    quotes = await sim.refresh()

    aapl = quotes["AAPL"]
    assert aapl.price == pytest.approx(150.5)
    assert aapl.change == pytest.approx(0.5)
    assert aapl.change_percent == pytest.approx(0.5 / 150.5 * 100)
    assert rng.calls == [(-1.0, 1.0)] * 3


@pytest.mark.asyncio
async def test_refresh_persists_new_prices(store, read_collection):
    sim = QuoteSimulator(store, rng=FixedStep(-0.25))

    await sim.refresh()

    stored = read_collection("stocks")
    assert stored["AAPL"]["price"] == pytest.approx(149.75)
    assert stored["AAPL"]["change"] == pytest.approx(-0.25)
    assert stored["GOOGL"]["price"] == pytest.approx(2799.75)


@pytest.mark.asyncio
async def test_listing_is_not_idempotent(store, read_collection):
    sim = QuoteSimulator(store, rng=random.Random(7))

    first = {s: q.price for s, q in (await sim.refresh()).items()}
    after_first = read_collection("stocks")
    second = {s: q.price for s, q in (await sim.refresh()).items()}

    assert first != second
    assert after_first != read_collection("stocks")
    assert {s: q["price"] for s, q in read_collection("stocks").items()} == pytest.approx(second)


@pytest.mark.asyncio
async def test_change_percent_uses_post_update_price(store):
    sim = QuoteSimulator(store, SimulatorConfig(max_step=0.75), rng=random.Random(123))

    for _ in range(5):
        for quote in (await sim.refresh()).values():
            assert -0.75 <= quote.change <= 0.75
            assert quote.change_percent == pytest.approx(quote.change / quote.price * 100)


@pytest.mark.asyncio
async def test_price_clamped_to_floor(store):
    await store.save(
        Collection.STOCKS,
        {"PENNY": {"symbol": "PENNY", "name": "Penny Corp", "price": 0.5, "change": 0, "changePercent": 0}},
    )
    sim = QuoteSimulator(store, SimulatorConfig(max_step=1.0, price_floor=0.01), rng=FixedStep(-1.0))

    quote = (await sim.refresh())["PENNY"]

    assert quote.price == 0.01
    assert quote.change == -1.0
    assert quote.change_percent == pytest.approx(-1.0 / 0.01 * 100)


@pytest.mark.asyncio
async def test_quotes_and_get_do_not_mutate(store, read_collection):
    sim = QuoteSimulator(store, rng=FixedStep(1.0))
    before = read_collection("stocks")

    quotes = await sim.quotes()
    aapl = await sim.get("AAPL")

    assert quotes["AAPL"].price == 150.0
    assert aapl.name == "Apple Inc."
    assert await sim.get("NOPE") is None
    assert read_collection("stocks") == before


class TestSearch:
    @pytest.mark.asyncio
    async def test_matches_symbol_case_insensitive(self, store):
        sim = QuoteSimulator(store)
        assert [q.symbol for q in await sim.search("aap")] == ["AAPL"]

    @pytest.mark.asyncio
    async def test_matches_name_case_insensitive(self, store):
        sim = QuoteSimulator(store)
        assert [q.symbol for q in await sim.search("MICROSOFT")] == ["MSFT"]

    @pytest.mark.asyncio
    async def test_matches_symbol_or_name(self, store):
        sim = QuoteSimulator(store)
        # "al" hits Alphabet's name and nothing else
        assert [q.symbol for q in await sim.search("al")] == ["GOOGL"]
        assert {q.symbol for q in await sim.search("inc")} == {"AAPL", "GOOGL"}

    @pytest.mark.asyncio
    async def test_empty_query_returns_all(self, store):
        sim = QuoteSimulator(store)
        assert {q.symbol for q in await sim.search("")} == {"AAPL", "GOOGL", "MSFT"}

    @pytest.mark.asyncio
    async def test_no_match(self, store):
        sim = QuoteSimulator(store)
        assert await sim.search("zzz") == []

    @pytest.mark.asyncio
    async def test_search_does_not_mutate(self, store, read_collection):
        before = read_collection("stocks")
        await QuoteSimulator(store).search("a")
        assert read_collection("stocks") == before


class TestSeed:
    SEED = [
        SeedQuoteConfig(symbol="IBM", name="International Business Machines", price=140.0),
        SeedQuoteConfig(symbol="NVDA", name="NVIDIA Corporation", price=450.0),
    ]

    @pytest.mark.asyncio
    async def test_seed_empty_store(self, tmp_path):
        store = CollectionStore(tmp_path)
        try:
            assert await QuoteSimulator(store).seed(self.SEED) is True
            quotes = await QuoteSimulator(store).quotes()
        finally:
            store.close()
        assert set(quotes) == {"IBM", "NVDA"}
        assert quotes["NVDA"].price == 450.0
        assert quotes["NVDA"].change == 0.0

    @pytest.mark.asyncio
    async def test_seed_keeps_existing_quotes(self, store, read_collection):
        assert await QuoteSimulator(store).seed(self.SEED) is False
        assert set(read_collection("stocks")) == {"AAPL", "GOOGL", "MSFT"}

    @pytest.mark.asyncio
    async def test_seed_overwrite(self, store, read_collection):
        assert await QuoteSimulator(store).seed(self.SEED, overwrite=True) is True
        assert set(read_collection("stocks")) == {"IBM", "NVDA"}
