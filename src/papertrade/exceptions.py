"""Consolidated exceptions for papertrade.

Every error carries the HTTP status class the API reports it with, so the
web layer can translate any of them in a single handler.
"""


class PaperTradeError(Exception):
    """Base exception for papertrade errors"""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class OrderError(PaperTradeError):
    """Base error for rejected order requests"""

    status_code = 400


class InvalidSymbol(OrderError):
    """Raised when no quote exists for the requested symbol"""

    def __init__(self, symbol: str):
        super().__init__(f"Invalid stock symbol: {symbol}")
        self.symbol = symbol


class InvalidPrice(OrderError):
    """Raised when a limit/stop order has a missing or non-positive price"""


class InvalidQuantity(OrderError):
    """Raised when the order quantity is not a positive integer"""


class InvalidOrderRequest(OrderError):
    """Raised when an order request body fails validation"""


class OrderNotFound(PaperTradeError):
    """Raised when no order exists with the given identifier"""

    status_code = 404

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class AlreadyExecuted(OrderError):
    """Raised when cancelling an order that has already executed"""

    def __init__(self, order_id: str):
        super().__init__(f"Cannot cancel executed order: {order_id}")
        self.order_id = order_id


class StorageFailure(PaperTradeError):
    """Raised when a collection cannot be read, parsed or written"""

    status_code = 500
