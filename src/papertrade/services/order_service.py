"""Order placement, execution and cancellation."""

from __future__ import annotations

import logging
import math
from enum import Enum
from typing import Any, TypeVar

from papertrade.constants import Collection, OrderSide, OrderStatus, OrderType
from papertrade.exceptions import (
    AlreadyExecuted,
    InvalidOrderRequest,
    InvalidPrice,
    InvalidQuantity,
    InvalidSymbol,
    OrderNotFound,
)
from papertrade.models import Order, Quote, Trade, generate_id, utc_now
from papertrade.persistence.collection_store import CollectionStore

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)


def _coerce_enum(enum_cls: type[E], value: Any, field: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).lower())
    except ValueError:
        valid = ", ".join(m.value for m in enum_cls)
        raise InvalidOrderRequest(f"Invalid {field}: {value!r} (expected one of {valid})")


class OrderService:
    """
    Places and cancels orders against the stored quote set.

    Market orders execute immediately at the current quote price and
    produce exactly one trade. Limit and stop orders are accepted and stay
    pending; nothing ever triggers them.
    """

    def __init__(self, store: CollectionStore):
        self.store = store

    async def place(
        self,
        symbol: str,
        side: OrderSide | str,
        order_type: OrderType | str,
        quantity: Any,
        price: Any = None,
    ) -> Order:
        """Validate and create an order, executing it immediately if it is a market order."""
        side = _coerce_enum(OrderSide, side, "side")
        order_type = _coerce_enum(OrderType, order_type, "order type")

        quote = await self._get_quote(symbol)
        if quote is None:
            logger.warning(f"Order rejected: unknown symbol {symbol!r}")
            raise InvalidSymbol(symbol)

        if order_type == OrderType.MARKET:
            order_price = quote.price
        else:
            order_price = self._validate_price(price, order_type)
        qty = self._validate_quantity(quantity)

        is_market = order_type == OrderType.MARKET
        locks = [Collection.ORDERS, Collection.TRADES] if is_market else [Collection.ORDERS]

        async with self.store.locked(*locks):
            orders = await self.store.load(Collection.ORDERS)
            now = utc_now()
            previous_id = str(orders[-1]["id"]) if orders else None

            order = Order(
                id=generate_id(previous_id, now),
                symbol=symbol,
                side=side,
                order_type=order_type,
                quantity=qty,
                price=order_price,
                status=OrderStatus.PENDING,
                timestamp=now,
            )

            updates: dict[Collection, Any] = {}
            if is_market:
                order.status = OrderStatus.EXECUTED
                order.executed_price = quote.price
                trades = await self.store.load(Collection.TRADES)
                trades.append(Trade.from_order(order).to_dict())
                updates[Collection.TRADES] = trades

            orders.append(order.to_dict())
            updates[Collection.ORDERS] = orders
            await self.store.save_many(updates)

        if is_market:
            logger.info(
                f"Order executed: {order.id} {side.value} {qty} {symbol} @ {order.executed_price:.2f}"
            )
        else:
            logger.info(
                f"Order placed: {order.id} {side.value} {qty} {symbol} "
                f"{order_type.value} @ {order_price:.2f} (pending)"
            )
        return order

    async def cancel(self, order_id: str) -> Order:
        """Cancel a pending order. Re-cancelling a cancelled order is allowed."""
        async with self.store.locked(Collection.ORDERS):
            orders = await self.store.load(Collection.ORDERS)
            for index, data in enumerate(orders):
                if str(data.get("id")) == order_id:
                    break
            else:
                raise OrderNotFound(order_id)

            order = Order.from_dict(data)
            if order.is_done:
                if order.status == OrderStatus.EXECUTED:
                    raise AlreadyExecuted(order_id)
                logger.debug(f"Order {order_id} already cancelled")
            order.status = OrderStatus.CANCELLED
            orders[index] = order.to_dict()
            await self.store.save(Collection.ORDERS, orders)

        logger.info(f"Order cancelled: {order_id}")
        return order

    async def list_orders(self) -> list[Order]:
        """All orders, newest first."""
        orders = await self.store.load(Collection.ORDERS)
        return [Order.from_dict(data) for data in reversed(orders)]

    async def list_trades(self) -> list[Trade]:
        """All trades, newest first."""
        trades = await self.store.load(Collection.TRADES)
        return [Trade.from_dict(data) for data in reversed(trades)]

    async def _get_quote(self, symbol: str) -> Quote | None:
        stocks = await self.store.load(Collection.STOCKS)
        data = stocks.get(symbol)
        return Quote.from_dict(data) if data else None

    @staticmethod
    def _validate_price(price: Any, order_type: OrderType) -> float:
        if price is None:
            raise InvalidPrice(f"A price is required for {order_type.value} orders")
        if isinstance(price, bool):
            raise InvalidPrice(f"Invalid price: {price!r}")
        try:
            value = float(price)
        except (TypeError, ValueError):
            raise InvalidPrice(f"Invalid price: {price!r}")
        if not math.isfinite(value) or value <= 0:
            raise InvalidPrice(f"Price must be positive, got: {price!r}")
        return value

    @staticmethod
    def _validate_quantity(quantity: Any) -> int:
        if isinstance(quantity, bool):
            raise InvalidQuantity(f"Invalid quantity: {quantity!r}")
        if isinstance(quantity, float) and quantity.is_integer():
            quantity = int(quantity)
        if isinstance(quantity, str):
            try:
                quantity = int(quantity.strip())
            except ValueError:
                raise InvalidQuantity(f"Quantity must be a whole number, got: {quantity!r}")
        if not isinstance(quantity, int):
            raise InvalidQuantity(f"Quantity must be a whole number, got: {quantity!r}")
        if quantity <= 0:
            raise InvalidQuantity(f"Quantity must be positive, got: {quantity}")
        return quantity
