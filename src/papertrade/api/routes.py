"""REST endpoints."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Request
from pydantic import BaseModel, Field

from papertrade.market.quote_simulator import QuoteSimulator
from papertrade.services.order_service import OrderService

router = APIRouter(prefix="/api")


class OrderBody(BaseModel):
    """Body of POST /api/orders. Field values are validated by OrderService."""

    symbol: str
    side: str = Field(alias="type")
    order_type: str = Field(alias="orderType")
    quantity: Any
    price: Any = None


def _simulator(request: Request) -> QuoteSimulator:
    return request.app.state.simulator


def _orders(request: Request) -> OrderService:
    return request.app.state.order_service


@router.get("/stocks")
async def list_stocks(request: Request) -> dict[str, Any]:
    """Move every quote one step and return the new set."""
    quotes = await _simulator(request).refresh()
    return {symbol: quote.to_dict() for symbol, quote in quotes.items()}


@router.get("/stocks/search")
@router.get("/stocks/search/")
@router.get("/stocks/search/{query}")
async def search_stocks(request: Request, query: str = "") -> list[dict[str, Any]]:
    quotes = await _simulator(request).search(query)
    return [quote.to_dict() for quote in quotes]


@router.post("/orders")
async def place_order(request: Request, body: OrderBody) -> dict[str, Any]:
    order = await _orders(request).place(
        symbol=body.symbol,
        side=body.side,
        order_type=body.order_type,
        quantity=body.quantity,
        price=body.price,
    )
    return order.to_dict()


@router.get("/orders")
async def list_orders(request: Request) -> list[dict[str, Any]]:
    return [order.to_dict() for order in await _orders(request).list_orders()]


@router.delete("/orders/{order_id}")
async def cancel_order(request: Request, order_id: str) -> dict[str, Any]:
    order = await _orders(request).cancel(order_id)
    return order.to_dict()


@router.get("/trades")
async def list_trades(request: Request) -> list[dict[str, Any]]:
    return [trade.to_dict() for trade in await _orders(request).list_trades()]
