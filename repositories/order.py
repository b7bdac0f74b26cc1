import logging

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Session

from db import session_execute, session_flush
from models.order import Order, OrderDTO
from models.orderItem import OrderItem
from models.order_timeline import OrderTimelineEntry
from models.shipping_address import ShippingAddress

logger = logging.getLogger(__name__)


class OrderRepository:
    # Columns that lifecycle actions may change after creation.
    # Totals and item snapshots (price, installation_cost) are write-once.
    MUTABLE_FIELDS = frozenset({
        'order_status',
        'payment_status',
        'gateway_payment_id',
        'gateway_signature',
        'tracking_carrier',
        'tracking_code',
        'tracking_url',
        'cancellation_reason',
        'cancelled_at',
        'return_reason',
        'return_status',
        'return_requested_at',
        'refund_amount',
    })

    @staticmethod
    async def create(order_dto: OrderDTO, session: Session | AsyncSession) -> int:
        """
        Persist an order together with its item snapshots, address and timeline.

        Args:
            order_dto: OrderDTO with items, shipping_address and initial timeline
            session: Database session (caller commits)

        Returns:
            ID of the created order
        """
        order_data = order_dto.model_dump(
            exclude={'id', 'items', 'timeline', 'shipping_address', 'created_at', 'updated_at'},
            exclude_none=True
        )
        order = Order(**order_data)
        order.items = [
            OrderItem(
                product_id=item.product_id,
                quantity=item.quantity,
                price=item.price,
                has_installation=item.has_installation,
                installation_cost=item.installation_cost
            )
            for item in order_dto.items
        ]
        order.timeline = [
            OrderTimelineEntry(status=entry.status, note=entry.note)
            for entry in order_dto.timeline
        ]
        if order_dto.shipping_address is not None:
            order.shipping_address = ShippingAddress(**order_dto.shipping_address.model_dump())

        session.add(order)
        await session_flush(session)
        return order.id

    @staticmethod
    async def _get_orm(order_id: int, session: Session | AsyncSession) -> Order | None:
        stmt = select(Order).where(Order.id == order_id)
        result = await session_execute(stmt, session)
        return result.scalar()

    @staticmethod
    async def get_by_id(order_id: int, session: Session | AsyncSession) -> OrderDTO | None:
        order = await OrderRepository._get_orm(order_id, session)
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_id_for_user(order_id: int, user_id: str, session: Session | AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.id == order_id, Order.user_id == user_id)
        result = await session_execute(stmt, session)
        order = result.scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_gateway_order_id(gateway_order_id: str, session: Session | AsyncSession) -> OrderDTO | None:
        stmt = select(Order).where(Order.gateway_order_id == gateway_order_id)
        result = await session_execute(stmt, session)
        order = result.scalar()
        if order is None:
            return None
        return OrderDTO.model_validate(order, from_attributes=True)

    @staticmethod
    async def get_by_user_id(user_id: str, session: Session | AsyncSession) -> list[OrderDTO]:
        stmt = select(Order).where(Order.user_id == user_id).order_by(Order.created_at.desc(), Order.id.desc())
        result = await session_execute(stmt, session)
        return [OrderDTO.model_validate(o, from_attributes=True) for o in result.scalars().all()]

    @staticmethod
    async def count_all(session: Session | AsyncSession) -> int:
        result = await session_execute(select(func.count(Order.id)), session)
        return result.scalar()

    @staticmethod
    async def update(
        order_id: int,
        values: dict,
        session: Session | AsyncSession,
        timeline_status: str | None = None,
        timeline_note: str | None = None
    ) -> OrderDTO | None:
        """
        Apply lifecycle changes to an order and optionally append a timeline entry.

        Args:
            order_id: Order ID
            values: Column -> new value, restricted to MUTABLE_FIELDS
            timeline_status: Status label for the timeline entry (None = no entry)
            timeline_note: Note for the timeline entry

        Returns:
            Updated OrderDTO, or None if the order does not exist

        Raises:
            ValueError: If values touch a write-once column
        """
        forbidden = set(values) - OrderRepository.MUTABLE_FIELDS
        if forbidden:
            raise ValueError(f"Order fields are immutable after creation: {', '.join(sorted(forbidden))}")

        order = await OrderRepository._get_orm(order_id, session)
        if order is None:
            return None

        for field, value in values.items():
            setattr(order, field, value)

        if timeline_status is not None:
            order.timeline.append(OrderTimelineEntry(status=timeline_status, note=timeline_note))

        await session_flush(session)
        logger.debug(f"Order {order_id} updated: {sorted(values)}")
        return OrderDTO.model_validate(order, from_attributes=True)
