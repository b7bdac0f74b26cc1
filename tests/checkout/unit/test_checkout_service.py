"""
Unit Tests for CheckoutService

Tests server-side order pricing and the order creation transaction against an
in-memory database. The payment gateway is always mocked.
"""

import pytest
from unittest.mock import AsyncMock, MagicMock

from enums.order_status import OrderStatus
from enums.payment_method import PaymentMethod
from enums.payment_status import PaymentStatus
from enums.vehicle_segment import VehicleSegment
from exceptions.order import (
    InsufficientStockException,
    InstallationUnavailableException,
    InvalidOrderInputException
)
from exceptions.payment import PaymentGatewayException
from exceptions.product import ProductNotFoundException
from exceptions.shipping import OutOfServiceAreaException
from models.cartItem import CartItemDTO
from models.checkout import CheckoutRequestDTO
from models.payment import PaymentIntentDTO
from models.product import InstallationOverrideDTO
from models.shipping_address import ShippingAddressDTO
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.checkout import CheckoutService
from services.installation import InstallationService


def mock_gateway(intent_id: str = "order_RZP123") -> MagicMock:
    gateway = MagicMock()
    gateway.create_payment_intent = AsyncMock(return_value=PaymentIntentDTO(
        intent_id=intent_id,
        amount=0,
        currency="INR",
        status="created"
    ))
    return gateway


def make_request(items: list[CartItemDTO], address: ShippingAddressDTO,
                 payment_method: PaymentMethod = PaymentMethod.COD,
                 vehicle_segment: VehicleSegment | None = VehicleSegment.SUV) -> CheckoutRequestDTO:
    return CheckoutRequestDTO(
        items=items,
        shipping_address=address,
        payment_method=payment_method,
        vehicle_segment=vehicle_segment
    )


async def stock_of(product_id: int, session) -> int:
    product = await ProductRepository.get_by_id(product_id, session)
    return product.stock


class TestPriceOrder:
    """Test CheckoutService.price_order()."""

    @pytest.mark.asyncio
    async def test_discount_price_plus_installation(self, test_session, add_product, add_rule):
        """2 x (900 discounted + 500 installation) = 2800."""
        product_id = await add_product(price=1000.0, discount_price=900.0)
        await add_rule("exterior-accessories", "alloy-wheels", None, {VehicleSegment.SUV: 500.0})

        priced = await CheckoutService.price_order(
            [CartItemDTO(product_id=product_id, quantity=2, has_installation=True)],
            VehicleSegment.SUV,
            test_session
        )

        line = priced.line_items[0]
        assert line.unit_price == 900.0
        assert line.installation_cost == 500.0
        assert line.line_total == 2800.0
        assert priced.total == 2800.0

    @pytest.mark.asyncio
    async def test_discount_not_below_list_price_is_ignored(self, test_session, add_product):
        product_id = await add_product(price=1000.0, discount_price=1200.0)

        priced = await CheckoutService.price_order(
            [CartItemDTO(product_id=product_id, quantity=1)], None, test_session
        )

        assert priced.total == 1000.0

    @pytest.mark.asyncio
    async def test_client_price_is_ignored(self, test_session, add_product):
        product_id = await add_product(price=1000.0)

        priced = await CheckoutService.price_order(
            [CartItemDTO(product_id=product_id, quantity=1, client_price=1.0)], None, test_session
        )

        assert priced.total == 1000.0

    @pytest.mark.asyncio
    async def test_free_installation_is_not_an_error(self, test_session, add_product):
        product_id = await add_product(installation_override=InstallationOverrideDTO(flat_rate=0.0))

        priced = await CheckoutService.price_order(
            [CartItemDTO(product_id=product_id, quantity=1, has_installation=True)], None, test_session
        )

        assert priced.line_items[0].has_installation is True
        assert priced.line_items[0].installation_cost == 0.0
        assert priced.total == 1000.0

    @pytest.mark.asyncio
    async def test_installation_without_rule_raises(self, test_session, add_product):
        product_id = await add_product()

        with pytest.raises(InstallationUnavailableException) as exc_info:
            await CheckoutService.price_order(
                [CartItemDTO(product_id=product_id, quantity=1, has_installation=True)],
                VehicleSegment.SUV,
                test_session
            )

        assert exc_info.value.product_id == product_id

    @pytest.mark.asyncio
    async def test_opted_out_product_raises(self, test_session, add_product, add_rule):
        product_id = await add_product(installation_override=InstallationOverrideDTO(is_available=False))
        await add_rule("exterior-accessories", None, None, {VehicleSegment.SUV: 300.0})

        with pytest.raises(InstallationUnavailableException):
            await CheckoutService.price_order(
                [CartItemDTO(product_id=product_id, quantity=1, has_installation=True)],
                VehicleSegment.SUV,
                test_session
            )

    @pytest.mark.asyncio
    async def test_insufficient_stock(self, test_session, add_product):
        product_id = await add_product(name="Roof Rack", stock=3)

        with pytest.raises(InsufficientStockException) as exc_info:
            await CheckoutService.price_order(
                [CartItemDTO(product_id=product_id, quantity=4)], None, test_session
            )

        assert exc_info.value.available == 3
        assert str(exc_info.value) == "Insufficient stock for: Roof Rack. Only 3 left."

    @pytest.mark.asyncio
    async def test_unknown_product(self, test_session):
        with pytest.raises(ProductNotFoundException):
            await CheckoutService.price_order([CartItemDTO(product_id=404, quantity=1)], None, test_session)

    @pytest.mark.asyncio
    async def test_quote_and_checkout_agree(self, test_session, add_product, add_rule):
        """Displayed installation price equals the charged one for the same catalog state."""
        product_id = await add_product(sub_sub_category="18-inch")
        await add_rule("exterior-accessories", "alloy-wheels", "18-inch", {VehicleSegment.MUV: 650.0})
        await add_rule("exterior-accessories", None, None, {VehicleSegment.MUV: 300.0})

        quote = await InstallationService.quote(product_id, test_session, vehicle_model="Innova Crysta")
        priced = await CheckoutService.price_order(
            [CartItemDTO(product_id=product_id, quantity=1, has_installation=True)],
            VehicleSegment.MUV,
            test_session
        )

        assert quote.price == priced.line_items[0].installation_cost == 650.0


class TestValidateServiceArea:

    def test_delhi_address_accepted(self, delhi_address):
        CheckoutService.validate_service_area(delhi_address)

    def test_state_is_case_insensitive(self, delhi_address):
        CheckoutService.validate_service_area(delhi_address.model_copy(update={'state': '  DELHI '}))

    def test_other_state_rejected(self, delhi_address):
        address = delhi_address.model_copy(update={'state': 'Maharashtra', 'zip': '400001'})

        with pytest.raises(OutOfServiceAreaException) as exc_info:
            CheckoutService.validate_service_area(address)

        assert "Delhi" in str(exc_info.value)

    def test_wrong_pincode_rejected(self, delhi_address):
        with pytest.raises(OutOfServiceAreaException) as exc_info:
            CheckoutService.validate_service_area(delhi_address.model_copy(update={'zip': '400001'}))

        assert "11" in str(exc_info.value)


class TestCreateOrder:
    """Test CheckoutService.create_order()."""

    @pytest.mark.asyncio
    async def test_cod_order_persists_snapshots(self, test_session, add_product, add_rule, delhi_address):
        product_id = await add_product(price=1000.0, discount_price=900.0, stock=10)
        await add_rule("exterior-accessories", "alloy-wheels", None, {VehicleSegment.SUV: 500.0})
        gateway = mock_gateway()

        created = await CheckoutService.create_order(
            make_request([CartItemDTO(product_id=product_id, quantity=2, has_installation=True)], delhi_address),
            "user-1",
            test_session,
            gateway
        )

        assert created.total == 2800.0
        assert created.currency == "INR"
        assert created.gateway_order_id is None
        gateway.create_payment_intent.assert_not_called()

        order = await OrderRepository.get_by_id(created.order_id, test_session)
        assert order.total_amount == 2800.0
        assert order.order_status == OrderStatus.PROCESSING
        assert order.payment_status == PaymentStatus.PENDING
        assert order.vehicle_segment == VehicleSegment.SUV
        assert order.items[0].price == 900.0
        assert order.items[0].installation_cost == 500.0
        assert order.timeline[0].status == OrderStatus.PROCESSING.value
        assert order.shipping_address.zip == "110001"
        assert await stock_of(product_id, test_session) == 8

    @pytest.mark.asyncio
    async def test_online_order_creates_payment_intent(self, test_session, add_product, delhi_address):
        product_id = await add_product(price=1499.5)
        gateway = mock_gateway("order_ABC")

        created = await CheckoutService.create_order(
            make_request([CartItemDTO(product_id=product_id, quantity=2)], delhi_address, PaymentMethod.RAZORPAY),
            "user-1",
            test_session,
            gateway
        )

        gateway.create_payment_intent.assert_awaited_once()
        amount, currency, receipt = gateway.create_payment_intent.call_args.args
        assert amount == 299900
        assert currency == "INR"
        assert receipt.startswith("receipt_")
        assert created.gateway_order_id == "order_ABC"
        assert created.gateway_key_id == "rzp_test_1234567890abcd"

        order = await OrderRepository.get_by_gateway_order_id("order_ABC", test_session)
        assert order.id == created.order_id

    @pytest.mark.asyncio
    async def test_insufficient_stock_skips_gateway(self, test_session, add_product, delhi_address):
        product_id = await add_product(stock=1)
        gateway = mock_gateway()

        with pytest.raises(InsufficientStockException):
            await CheckoutService.create_order(
                make_request([CartItemDTO(product_id=product_id, quantity=2)], delhi_address,
                             PaymentMethod.RAZORPAY),
                "user-1",
                test_session,
                gateway
            )

        gateway.create_payment_intent.assert_not_called()
        assert await OrderRepository.count_all(test_session) == 0
        assert await stock_of(product_id, test_session) == 1

    @pytest.mark.asyncio
    async def test_out_of_area_leaves_stock_untouched(self, test_session, add_product, delhi_address):
        product_id = await add_product(stock=5)
        gateway = mock_gateway()
        mumbai = delhi_address.model_copy(update={'state': 'Maharashtra', 'city': 'Mumbai', 'zip': '400001'})

        with pytest.raises(OutOfServiceAreaException):
            await CheckoutService.create_order(
                make_request([CartItemDTO(product_id=product_id, quantity=1)], mumbai, PaymentMethod.RAZORPAY),
                "user-1",
                test_session,
                gateway
            )

        gateway.create_payment_intent.assert_not_called()
        assert await OrderRepository.count_all(test_session) == 0
        assert await stock_of(product_id, test_session) == 5

    @pytest.mark.asyncio
    async def test_gateway_failure_rolls_back(self, test_session, add_product, delhi_address):
        """Stock taken in step 4 is restored when the gateway fails."""
        product_id = await add_product(stock=5)
        gateway = mock_gateway()
        gateway.create_payment_intent.side_effect = PaymentGatewayException("create order", "HTTP 502", 502)

        with pytest.raises(PaymentGatewayException):
            await CheckoutService.create_order(
                make_request([CartItemDTO(product_id=product_id, quantity=3)], delhi_address,
                             PaymentMethod.RAZORPAY),
                "user-1",
                test_session,
                gateway
            )

        assert await OrderRepository.count_all(test_session) == 0
        assert await stock_of(product_id, test_session) == 5

    @pytest.mark.asyncio
    async def test_duplicate_lines_cannot_oversell(self, test_session, add_product, delhi_address):
        """Two lines of the same product each fit in stock, together they don't."""
        product_id = await add_product(stock=3)

        with pytest.raises(InsufficientStockException):
            await CheckoutService.create_order(
                make_request([
                    CartItemDTO(product_id=product_id, quantity=2),
                    CartItemDTO(product_id=product_id, quantity=2),
                ], delhi_address),
                "user-1",
                test_session,
                mock_gateway()
            )

        assert await stock_of(product_id, test_session) == 3

    @pytest.mark.asyncio
    async def test_last_unit_sold_once(self, test_session, add_product, delhi_address):
        product_id = await add_product(stock=1)
        request = make_request([CartItemDTO(product_id=product_id, quantity=1)], delhi_address)

        await CheckoutService.create_order(request, "user-1", test_session, mock_gateway())
        with pytest.raises(InsufficientStockException):
            await CheckoutService.create_order(request, "user-2", test_session, mock_gateway())

        assert await OrderRepository.count_all(test_session) == 1
        assert await stock_of(product_id, test_session) == 0

    @pytest.mark.asyncio
    async def test_empty_cart_rejected(self, test_session, delhi_address):
        with pytest.raises(InvalidOrderInputException):
            await CheckoutService.create_order(make_request([], delhi_address), "user-1", test_session,
                                               mock_gateway())

    @pytest.mark.asyncio
    async def test_installation_unavailable_creates_nothing(self, test_session, add_product, delhi_address):
        product_id = await add_product(stock=4)

        with pytest.raises(InstallationUnavailableException):
            await CheckoutService.create_order(
                make_request([CartItemDTO(product_id=product_id, quantity=1, has_installation=True)],
                             delhi_address),
                "user-1",
                test_session,
                mock_gateway()
            )

        assert await OrderRepository.count_all(test_session) == 0
        assert await stock_of(product_id, test_session) == 4

    @pytest.mark.asyncio
    async def test_snapshots_survive_catalog_changes(self, test_session, add_product, add_rule, delhi_address):
        """Later price or rule edits never change an existing order."""
        product_id = await add_product(price=1000.0)
        await add_rule("exterior-accessories", None, None, {VehicleSegment.SUV: 300.0})
        created = await CheckoutService.create_order(
            make_request([CartItemDTO(product_id=product_id, quantity=1, has_installation=True)], delhi_address),
            "user-1",
            test_session,
            mock_gateway()
        )

        await ProductRepository.update_prices(product_id, 2000.0, None, test_session)
        await InstallationService.save_rule("exterior-accessories", None, None, {"SUV": 900}, test_session)

        order = await OrderRepository.get_by_id(created.order_id, test_session)
        assert order.items[0].price == 1000.0
        assert order.items[0].installation_cost == 300.0
        assert order.total_amount == 1300.0

    @pytest.mark.asyncio
    async def test_repository_rejects_snapshot_updates(self, test_session, add_product, delhi_address):
        product_id = await add_product()
        created = await CheckoutService.create_order(
            make_request([CartItemDTO(product_id=product_id, quantity=1)], delhi_address),
            "user-1",
            test_session,
            mock_gateway()
        )

        with pytest.raises(ValueError):
            await OrderRepository.update(created.order_id, {'total_amount': 1.0}, test_session)
