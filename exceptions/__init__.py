"""
Custom exceptions for the storefront.

This module provides a hierarchy of custom exceptions for consistent error handling
throughout the application.

Exception Hierarchy:
--------------------
StorefrontException (base)
├── ProductException
│   ├── ProductNotFoundException
│   └── InvalidInstallationRuleException
├── CatalogException
│   └── CatalogUnavailableException
├── OrderException
│   ├── OrderNotFoundException
│   ├── InsufficientStockException
│   ├── InstallationUnavailableException
│   ├── InvalidOrderInputException
│   └── InvalidOrderStateException
├── PaymentException
│   ├── PaymentGatewayException
│   └── InvalidPaymentSignatureException
└── ShippingException
    └── OutOfServiceAreaException

Usage:
------
Services raise specific exceptions:
    raise ProductNotFoundException(product_id=123)

Callers of the checkout pipeline catch the base class and report the message:
    try:
        await CheckoutService.create_order(request, user_id, session, gateway)
    except StorefrontException as e:
        return {"error": str(e)}
"""

from .base import StorefrontException
from .catalog import CatalogException, CatalogUnavailableException
from .order import (
    OrderException,
    OrderNotFoundException,
    InsufficientStockException,
    InstallationUnavailableException,
    InvalidOrderInputException,
    InvalidOrderStateException
)
from .payment import PaymentException, PaymentGatewayException, InvalidPaymentSignatureException
from .product import ProductException, ProductNotFoundException, InvalidInstallationRuleException
from .shipping import ShippingException, OutOfServiceAreaException

__all__ = [
    # Base
    'StorefrontException',

    # Catalog
    'CatalogException',
    'CatalogUnavailableException',

    # Order
    'OrderException',
    'OrderNotFoundException',
    'InsufficientStockException',
    'InstallationUnavailableException',
    'InvalidOrderInputException',
    'InvalidOrderStateException',

    # Payment
    'PaymentException',
    'PaymentGatewayException',
    'InvalidPaymentSignatureException',

    # Product
    'ProductException',
    'ProductNotFoundException',
    'InvalidInstallationRuleException',

    # Shipping
    'ShippingException',
    'OutOfServiceAreaException',
]
