"""Simulated market data."""

from papertrade.market.quote_simulator import QuoteSimulator

__all__ = ["QuoteSimulator"]
