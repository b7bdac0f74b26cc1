"""
Product-related exceptions.
"""

from .base import StorefrontException


class ProductException(StorefrontException):
    """Base exception for product-related errors."""
    pass


class ProductNotFoundException(ProductException):
    """Raised when a product is not found in the catalog."""

    def __init__(self, product_id: int):
        super().__init__(
            f"Product not found: {product_id}",
            details={'product_id': product_id}
        )
        self.product_id = product_id


class InvalidInstallationRuleException(ProductException):
    """Raised when an installation rule has an invalid key or rate table."""

    def __init__(self, category: str | None, reason: str):
        super().__init__(
            f"Invalid installation rule for category '{category}': {reason}",
            details={'category': category, 'reason': reason}
        )
        self.category = category
        self.reason = reason
