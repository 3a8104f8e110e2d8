"""Core constants for papertrade."""

from enum import Enum


class Collection(str, Enum):
    """Persisted collections. Each one lives in its own JSON file."""

    STOCKS = "stocks"
    ORDERS = "orders"
    TRADES = "trades"

    @property
    def filename(self) -> str:
        return f"{self.value}.json"


class OrderSide(str, Enum):
    """Order side (buy/sell)."""

    BUY = "buy"
    SELL = "sell"


class OrderType(str, Enum):
    """Order kind."""

    MARKET = "market"
    LIMIT = "limit"
    STOP = "stop"


class OrderStatus(str, Enum):
    """Order lifecycle status."""

    PENDING = "pending"
    EXECUTED = "executed"
    CANCELLED = "cancelled"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


# ============================================
# Default Values
# ============================================

DEFAULT_MAX_STEP = 1.0
DEFAULT_PRICE_FLOOR = 0.01

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8080
DEFAULT_DATA_DIR = "./data"
DEFAULT_CONFIG_PATH = "config/config.yaml"

# ============================================
# Application Constants
# ============================================

APP_NAME = "papertrade"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
