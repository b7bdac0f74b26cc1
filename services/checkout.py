import logging
from datetime import datetime

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

import config
from db import session_commit, session_rollback
from enums.order_status import OrderStatus
from enums.payment_status import PaymentStatus
from enums.vehicle_segment import VehicleSegment
from exceptions.order import (
    InsufficientStockException,
    InstallationUnavailableException,
    InvalidOrderInputException
)
from exceptions.shipping import OutOfServiceAreaException
from models.cartItem import CartItemDTO
from models.checkout import CheckoutRequestDTO, CreatedOrderDTO, PricedLineItemDTO, PricedOrderDTO
from models.order import OrderDTO
from models.orderItem import OrderItemDTO
from models.order_timeline import OrderTimelineEntryDTO
from models.shipping_address import ShippingAddressDTO
from repositories.order import OrderRepository
from repositories.product import ProductRepository
from services.installation import InstallationService
from services.payment_gateway import PaymentGateway, RazorpayGateway
from services.product import ProductService

logger = logging.getLogger(__name__)


class CheckoutService:

    @staticmethod
    def validate_input(request: CheckoutRequestDTO) -> None:
        """
        Reject malformed checkout requests before touching the catalog.

        Raises:
            InvalidOrderInputException: Empty cart or non-positive quantity
        """
        if not request.items:
            raise InvalidOrderInputException("cart is empty")
        for item in request.items:
            if item.quantity is None or item.quantity <= 0:
                raise InvalidOrderInputException(
                    f"quantity for product {item.product_id} must be positive (got {item.quantity})"
                )

    @staticmethod
    def validate_service_area(address: ShippingAddressDTO) -> None:
        """
        Region lock: only addresses inside the serviced state and pincode range.

        Raises:
            OutOfServiceAreaException: If state or postal code is outside the area
        """
        state = (address.state or "").strip().lower()
        postal_code = (address.zip or "").strip()

        if state != config.SERVICE_AREA_STATE:
            raise OutOfServiceAreaException(
                address.state,
                address.zip,
                f"We currently deliver only within {config.SERVICE_AREA_STATE.title()}."
            )
        if not postal_code.startswith(config.SERVICE_AREA_PINCODE_PREFIX):
            raise OutOfServiceAreaException(
                address.state,
                address.zip,
                f"Invalid pincode for {config.SERVICE_AREA_STATE.title()}. "
                f"It should start with '{config.SERVICE_AREA_PINCODE_PREFIX}'."
            )

    @staticmethod
    async def price_order(
        items: list[CartItemDTO],
        vehicle_segment: VehicleSegment | None,
        session: Session | AsyncSession
    ) -> PricedOrderDTO:
        """
        Price a cart from current catalog data only.

        Client-submitted prices are ignored. Installation is priced through the
        same resolver the product page uses, so a quote and a checkout taken
        from the same catalog state always agree.

        Args:
            items: Cart lines
            vehicle_segment: Customer's vehicle segment (None = unknown)
            session: Database session

        Returns:
            PricedOrderDTO with per-line breakdown and total

        Raises:
            ProductNotFoundException: Unknown product
            InsufficientStockException: Requested quantity exceeds stock
            InstallationUnavailableException: Installation requested but not offered
            CatalogUnavailableException: Catalog or rule store unreachable
        """
        line_items = []
        total = 0.0

        for item in items:
            product = await ProductService.get_product(item.product_id, session)

            available_stock = product.stock or 0
            if available_stock < item.quantity:
                raise InsufficientStockException(product.id, product.name, item.quantity, available_stock)

            unit_price = ProductService.get_unit_price(product)
            if item.client_price is not None and abs(item.client_price - unit_price) > 0.005:
                logger.warning(
                    f"Client price drift for product {product.id}: "
                    f"client={item.client_price:.2f} server={unit_price:.2f}"
                )

            installation = None
            installation_cost = 0.0
            if item.has_installation:
                installation = await InstallationService.resolve_for_product(product, vehicle_segment, session)
                if not installation.available:
                    raise InstallationUnavailableException(
                        product.id,
                        product.name,
                        vehicle_segment.value if vehicle_segment else None
                    )
                installation_cost = installation.price or 0.0

            line_total = round(item.quantity * (unit_price + installation_cost), 2)
            total += line_total
            line_items.append(PricedLineItemDTO(
                product_id=product.id,
                product_name=product.name,
                quantity=item.quantity,
                unit_price=unit_price,
                has_installation=item.has_installation,
                installation_cost=installation_cost,
                installation=installation,
                line_total=line_total
            ))

        return PricedOrderDTO(
            line_items=line_items,
            total=round(total, 2),
            vehicle_segment=vehicle_segment
        )

    @staticmethod
    async def _reserve_stock(priced: PricedOrderDTO, session: Session | AsyncSession) -> None:
        for line in priced.line_items:
            decremented = await ProductRepository.decrement_stock(line.product_id, line.quantity, session)
            if not decremented:
                product = await ProductRepository.get_by_id(line.product_id, session)
                available = product.stock if product is not None and product.stock is not None else 0
                raise InsufficientStockException(line.product_id, line.product_name, line.quantity, available)

    @staticmethod
    async def create_order(
        request: CheckoutRequestDTO,
        user_id: str,
        session: Session | AsyncSession,
        gateway: PaymentGateway | None = None
    ) -> CreatedOrderDTO:
        """
        Turn a cart into a persisted order.

        Flow (single transaction):
        1. Validate input
        2. Price the cart from catalog data
        3. Check the service area
        4. Decrement stock atomically per line
        5. Create the gateway payment intent (online payments only)
        6. Persist order, item snapshots, address and first timeline entry

        Any failure rolls back the transaction: no order is stored and stock is
        untouched. The gateway is only contacted once steps 1-4 succeeded.

        Raises:
            InvalidOrderInputException, ProductNotFoundException,
            InsufficientStockException, InstallationUnavailableException,
            OutOfServiceAreaException, PaymentGatewayException,
            CatalogUnavailableException
        """
        try:
            CheckoutService.validate_input(request)

            vehicle_segment = InstallationService.resolve_vehicle_segment(
                request.vehicle_segment, request.vehicle_model
            )
            priced = await CheckoutService.price_order(request.items, vehicle_segment, session)
            CheckoutService.validate_service_area(request.shipping_address)
            await CheckoutService._reserve_stock(priced, session)

            currency = config.CURRENCY
            gateway_order_id = None
            if request.payment_method.is_online:
                gateway = gateway or RazorpayGateway()
                amount_minor_units = int(round(priced.total * currency.minor_unit_factor))
                receipt = f"receipt_{int(datetime.now().timestamp() * 1000)}"
                intent = await gateway.create_payment_intent(amount_minor_units, currency.value, receipt)
                gateway_order_id = intent.intent_id

            books_installation = any(line.has_installation for line in priced.line_items)
            order_dto = OrderDTO(
                user_id=user_id,
                total_amount=priced.total,
                currency=currency,
                payment_method=request.payment_method,
                payment_status=PaymentStatus.PENDING,
                order_status=OrderStatus.PROCESSING,
                vehicle_segment=vehicle_segment if books_installation else None,
                gateway_order_id=gateway_order_id,
                items=[
                    OrderItemDTO(
                        product_id=line.product_id,
                        quantity=line.quantity,
                        price=line.unit_price,
                        has_installation=line.has_installation,
                        installation_cost=line.installation_cost
                    )
                    for line in priced.line_items
                ],
                timeline=[OrderTimelineEntryDTO(status=OrderStatus.PROCESSING.value, note="Order placed")],
                shipping_address=request.shipping_address
            )
            order_id = await OrderRepository.create(order_dto, session)
            await session_commit(session)
        except Exception as e:
            await session_rollback(session)
            logger.warning(f"Checkout rejected for user {user_id}: {type(e).__name__}: {e}")
            raise

        logger.info(
            f"Order {order_id} created for user {user_id}: total={priced.total:.2f} {currency.value}, "
            f"method={request.payment_method.value}, lines={len(priced.line_items)}"
        )
        return CreatedOrderDTO(
            order_id=order_id,
            total=priced.total,
            currency=currency.value,
            gateway_order_id=gateway_order_id,
            gateway_key_id=config.RAZORPAY_KEY_ID if gateway_order_id else None
        )
