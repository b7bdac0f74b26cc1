"""
Order-related exceptions.
"""

from .base import StorefrontException


class OrderException(StorefrontException):
    """Base exception for order-related errors."""
    pass


class OrderNotFoundException(OrderException):
    """Raised when order is not found in database."""

    def __init__(self, order_id: int | str):
        super().__init__(
            f"Order {order_id} not found",
            details={'order_id': order_id}
        )
        self.order_id = order_id


class InsufficientStockException(OrderException):
    """Raised when requested quantity exceeds available stock."""

    def __init__(self, product_id: int, product_name: str, requested: int, available: int):
        super().__init__(
            f"Insufficient stock for: {product_name}. Only {available} left.",
            details={
                'product_id': product_id,
                'product_name': product_name,
                'requested': requested,
                'available': available
            }
        )
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available


class InstallationUnavailableException(OrderException):
    """Raised when installation is requested for a product that cannot be installed."""

    def __init__(self, product_id: int, product_name: str, vehicle_segment: str | None = None):
        super().__init__(
            f"Installation not available for: {product_name}",
            details={'product_id': product_id, 'product_name': product_name, 'vehicle_segment': vehicle_segment}
        )
        self.product_id = product_id
        self.product_name = product_name
        self.vehicle_segment = vehicle_segment


class InvalidOrderInputException(OrderException):
    """Raised when a cart, address or payment request is malformed."""

    def __init__(self, reason: str):
        super().__init__(
            f"Invalid order input: {reason}",
            details={'reason': reason}
        )
        self.reason = reason


class InvalidOrderStateException(OrderException):
    """Raised when order is in invalid state for requested operation."""

    def __init__(self, order_id: int, current_state: str, required_state: str):
        super().__init__(
            f"Order {order_id} is in state '{current_state}', required '{required_state}'",
            details={'order_id': order_id, 'current_state': current_state, 'required_state': required_state}
        )
        self.order_id = order_id
        self.current_state = current_state
        self.required_state = required_state
