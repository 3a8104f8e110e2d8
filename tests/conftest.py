"""Shared fixtures."""

import json

import pytest

from papertrade.persistence.collection_store import CollectionStore

SEED_STOCKS = {
    "AAPL": {"symbol": "AAPL", "name": "Apple Inc.", "price": 150.0, "change": 0.0, "changePercent": 0.0},
    "GOOGL": {"symbol": "GOOGL", "name": "Alphabet Inc.", "price": 2800.0, "change": 0.0, "changePercent": 0.0},
    "MSFT": {"symbol": "MSFT", "name": "Microsoft Corporation", "price": 300.0, "change": 0.0, "changePercent": 0.0},
}


@pytest.fixture
def data_dir(tmp_path):
    path = tmp_path / "data"
    path.mkdir()
    (path / "stocks.json").write_text(json.dumps(SEED_STOCKS, indent=2))
    return path


@pytest.fixture
def store(data_dir):
    store = CollectionStore(data_dir)
    yield store
    store.close()


@pytest.fixture
def read_collection(data_dir):
    def _read(name):
        return json.loads((data_dir / f"{name}.json").read_text())

    return _read
