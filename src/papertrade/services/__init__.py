"""Trading services."""

from papertrade.services.order_service import OrderService

__all__ = ["OrderService"]
