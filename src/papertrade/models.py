"""Domain models and their persisted JSON shape."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from papertrade.constants import OrderSide, OrderStatus, OrderType


def utc_now() -> datetime:
    """Current UTC time, truncated to the millisecond precision timestamps are stored with."""
    now = datetime.now(timezone.utc)
    return now.replace(microsecond=now.microsecond // 1000 * 1000)


def format_timestamp(ts: datetime) -> str:
    """ISO-8601 in UTC with millisecond precision and a Z suffix."""
    return ts.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


def generate_id(previous: str | None = None, now: datetime | None = None) -> str:
    """
    Generate an order identifier.

    Identifiers are the creation time in epoch milliseconds. When the clock
    has not moved past the last issued identifier the previous value is
    bumped by one, so identifiers stay strictly increasing.
    """
    now = now or utc_now()
    candidate = int(now.timestamp() * 1000)
    if previous is not None and previous.isdigit():
        candidate = max(candidate, int(previous) + 1)
    return str(candidate)


@dataclass
class Quote:
    """Current simulated price for one symbol."""

    symbol: str
    name: str
    price: float
    change: float = 0.0
    change_percent: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "name": self.name,
            "price": self.price,
            "change": self.change,
            "changePercent": self.change_percent,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Quote:
        return cls(
            symbol=data["symbol"],
            name=data.get("name", data["symbol"]),
            price=float(data["price"]),
            change=float(data.get("change", 0.0)),
            change_percent=float(data.get("changePercent", 0.0)),
        )


@dataclass
class Order:
    """Order state."""

    id: str
    symbol: str
    side: OrderSide
    order_type: OrderType
    quantity: int
    price: float
    status: OrderStatus = OrderStatus.PENDING
    timestamp: datetime = field(default_factory=utc_now)
    executed_price: float | None = None

    @property
    def is_done(self) -> bool:
        return self.status in [OrderStatus.EXECUTED, OrderStatus.CANCELLED]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "symbol": self.symbol,
            "type": self.side.value,
            "orderType": self.order_type.value,
            "quantity": self.quantity,
            "price": self.price,
            "status": self.status.value,
            "timestamp": format_timestamp(self.timestamp),
        }
        if self.executed_price is not None:
            data["executedPrice"] = self.executed_price
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Order:
        executed_price = data.get("executedPrice")
        return cls(
            id=str(data["id"]),
            symbol=data["symbol"],
            side=OrderSide(data["type"]),
            order_type=OrderType(data["orderType"]),
            quantity=int(data["quantity"]),
            price=float(data["price"]),
            status=OrderStatus(data["status"]),
            timestamp=parse_timestamp(data["timestamp"]),
            executed_price=float(executed_price) if executed_price is not None else None,
        )


@dataclass(frozen=True)
class Trade:
    """Completed execution. Shares its id with the originating order."""

    id: str
    symbol: str
    side: OrderSide
    quantity: int
    price: float
    timestamp: datetime

    @classmethod
    def from_order(cls, order: Order) -> Trade:
        if order.executed_price is None:
            raise ValueError(f"Order {order.id} has not executed")
        return cls(
            id=order.id,
            symbol=order.symbol,
            side=order.side,
            quantity=order.quantity,
            price=order.executed_price,
            timestamp=order.timestamp,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "symbol": self.symbol,
            "type": self.side.value,
            "quantity": self.quantity,
            "price": self.price,
            "timestamp": format_timestamp(self.timestamp),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Trade:
        return cls(
            id=str(data["id"]),
            symbol=data["symbol"],
            side=OrderSide(data["type"]),
            quantity=int(data["quantity"]),
            price=float(data["price"]),
            timestamp=parse_timestamp(data["timestamp"]),
        )
