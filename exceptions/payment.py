"""
Payment-related exceptions.
"""

from .base import StorefrontException


class PaymentException(StorefrontException):
    """Base exception for payment-related errors."""
    pass


class PaymentGatewayException(PaymentException):
    """Raised when the payment gateway rejects, fails or times out."""

    def __init__(self, operation: str, reason: str, status_code: int | None = None):
        super().__init__(
            f"Payment gateway {operation} failed: {reason}",
            details={'operation': operation, 'reason': reason, 'status_code': status_code}
        )
        self.operation = operation
        self.reason = reason
        self.status_code = status_code


class InvalidPaymentSignatureException(PaymentException):
    """Raised when a gateway callback signature does not match."""

    def __init__(self, gateway_order_id: str):
        super().__init__(
            f"Payment verification failed: invalid signature for gateway order {gateway_order_id}",
            details={'gateway_order_id': gateway_order_id}
        )
        self.gateway_order_id = gateway_order_id
