"""Paper-trading demo backend: simulated quotes, orders and trades over a REST API."""

__version__ = "0.1.0"
