"""
Tests for the storefront exception hierarchy.

Messages are shown to customers as-is, so their wording is part of the contract.
"""

import pytest

from exceptions import (
    CatalogException,
    CatalogUnavailableException,
    InstallationUnavailableException,
    InsufficientStockException,
    InvalidOrderInputException,
    InvalidOrderStateException,
    InvalidPaymentSignatureException,
    OrderException,
    OutOfServiceAreaException,
    PaymentException,
    PaymentGatewayException,
    ProductException,
    ProductNotFoundException,
    ShippingException,
    StorefrontException
)


class TestHierarchy:

    @pytest.mark.parametrize("exc,group", [
        (ProductNotFoundException(1), ProductException),
        (CatalogUnavailableException("product lookup", "timeout"), CatalogException),
        (InsufficientStockException(1, "Mat", 3, 1), OrderException),
        (InstallationUnavailableException(1, "Mat", "SUV"), OrderException),
        (InvalidOrderInputException("cart is empty"), OrderException),
        (PaymentGatewayException("create order", "HTTP 500", 500), PaymentException),
        (InvalidPaymentSignatureException("order_1"), PaymentException),
        (OutOfServiceAreaException("Goa", "403001", "We currently deliver only within Delhi."), ShippingException),
    ])
    def test_groups_and_base(self, exc, group):
        assert isinstance(exc, group)
        assert isinstance(exc, StorefrontException)


class TestMessages:

    def test_insufficient_stock_message(self):
        exc = InsufficientStockException(5, "Rubber Mat", requested=4, available=2)

        assert str(exc) == "Insufficient stock for: Rubber Mat. Only 2 left."
        assert exc.details == {'product_id': 5, 'product_name': 'Rubber Mat', 'requested': 4, 'available': 2}

    def test_out_of_area_message_is_reason(self):
        exc = OutOfServiceAreaException("Goa", "403001", "We currently deliver only within Delhi.")
        assert str(exc) == "We currently deliver only within Delhi."

    def test_invalid_state_details(self):
        exc = InvalidOrderStateException(9, "SHIPPED", "PROCESSING")

        assert exc.current_state == "SHIPPED"
        assert "PROCESSING" in str(exc)

    def test_repr_includes_details(self):
        exc = PaymentGatewayException("create order", "HTTP 502", 502)
        assert "status_code=502" in repr(exc)

    def test_exception_without_details(self):
        exc = StorefrontException("boom")

        assert exc.details == {}
        assert repr(exc) == "StorefrontException('boom')"
