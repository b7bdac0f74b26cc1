"""
Catalog store infrastructure exceptions.
"""

from .base import StorefrontException


class CatalogException(StorefrontException):
    """Base exception for catalog store errors."""
    pass


class CatalogUnavailableException(CatalogException):
    """Raised when the catalog or rule store cannot be reached in time."""

    def __init__(self, operation: str, reason: str):
        super().__init__(
            f"Catalog unavailable during {operation}: {reason}",
            details={'operation': operation, 'reason': reason}
        )
        self.operation = operation
        self.reason = reason
