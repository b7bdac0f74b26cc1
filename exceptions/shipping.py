"""
Shipping-related exceptions.
"""

from .base import StorefrontException


class ShippingException(StorefrontException):
    """Base exception for shipping-related errors."""
    pass


class OutOfServiceAreaException(ShippingException):
    """Raised when the shipping address is outside the serviced region."""

    def __init__(self, state: str | None, postal_code: str | None, reason: str):
        super().__init__(
            reason,
            details={'state': state, 'postal_code': postal_code}
        )
        self.state = state
        self.postal_code = postal_code
        self.reason = reason
