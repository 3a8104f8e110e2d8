"""Tests for the command line interface."""

import json

import pytest
from click.testing import CliRunner

from papertrade.cli import cli


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"""
environment:
  data_dir: {tmp_path / "data"}
seed:
  quotes:
    - {{symbol: AAPL, name: Apple Inc., price: 150}}
    - {{symbol: TSLA, name: Tesla Inc., price: 800}}
"""
    )
    return path


def test_seed_writes_quotes(config_file, tmp_path):
    result = CliRunner().invoke(cli, ["seed", "--config", str(config_file)])

    assert result.exit_code == 0, result.output
    assert "Seeded 2 quotes" in result.output
    stocks = json.loads((tmp_path / "data" / "stocks.json").read_text())
    assert stocks["TSLA"] == {
        "symbol": "TSLA",
        "name": "Tesla Inc.",
        "price": 800.0,
        "change": 0.0,
        "changePercent": 0.0,
    }


def test_seed_twice_is_noop(config_file):
    runner = CliRunner()
    runner.invoke(cli, ["seed", "--config", str(config_file)])

    result = runner.invoke(cli, ["seed", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "nothing to do" in result.output


def test_seed_reset_clears_orders_and_trades(config_file, tmp_path):
    data = tmp_path / "data"
    data.mkdir()
    (data / "stocks.json").write_text(json.dumps({}))
    (data / "orders.json").write_text(json.dumps([{"id": "1"}]))
    (data / "trades.json").write_text(json.dumps([{"id": "1"}]))

    result = CliRunner().invoke(cli, ["seed", "--config", str(config_file), "--reset"])

    assert result.exit_code == 0, result.output
    assert json.loads((data / "orders.json").read_text()) == []
    assert json.loads((data / "trades.json").read_text()) == []
    assert set(json.loads((data / "stocks.json").read_text())) == {"AAPL", "TSLA"}


def test_seed_data_dir_override(config_file, tmp_path):
    other = tmp_path / "other"

    result = CliRunner().invoke(
        cli, ["seed", "--config", str(config_file), "--data-dir", str(other)]
    )

    assert result.exit_code == 0, result.output
    assert (other / "stocks.json").exists()


def test_smoke_test(config_file):
    result = CliRunner().invoke(cli, ["smoke-test", "--config", str(config_file)])

    assert result.exit_code == 0
    assert "Smoke test passed" in result.output


def test_smoke_test_invalid_config(tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("simulator:\n  max_step: -1")

    result = CliRunner().invoke(cli, ["smoke-test", "--config", str(bad)])

    assert result.exit_code == 1
